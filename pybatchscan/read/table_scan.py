################################################################################
#  Licensed to the Apache Software Foundation (ASF) under one
#  or more contributor license agreements.  See the NOTICE file
#  distributed with this work for additional information
#  regarding copyright ownership.  The ASF licenses this file
#  to you under the Apache License, Version 2.0 (the
#  "License"); you may not use this file except in compliance
#  with the License.  You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
# limitations under the License.
################################################################################

from abc import ABC, abstractmethod
from typing import Optional

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.common.predicate import Predicate
from pybatchscan.read.scan_task import CombinedScanTask, FileScanTask
from pybatchscan.schema.schema import Schema
from pybatchscan.table.snapshot import Snapshot


class TableScan(ABC):
    """
    A scan of a table, configured through immutable refinement: every configuration method
    returns a new scan and leaves this one untouched.
    """

    @abstractmethod
    def table(self):
        """The table this scan reads."""

    @abstractmethod
    def case_sensitive(self, case_sensitive: bool) -> 'TableScan':
        """Whether column names in projections and filters are matched case sensitively."""

    @abstractmethod
    def is_case_sensitive(self) -> bool:
        pass

    @abstractmethod
    def project(self, schema: Schema) -> 'TableScan':
        pass

    @abstractmethod
    def use_snapshot(self, snapshot_id: int) -> 'TableScan':
        pass

    @abstractmethod
    def as_of_time(self, timestamp_millis: int) -> 'TableScan':
        """Reads the snapshot that was current at the given time."""

    @abstractmethod
    def option(self, key: str, value: str) -> 'TableScan':
        """Overrides a table property for this scan only, e.g. read.split.target-size."""

    @abstractmethod
    def filter(self, predicate: Predicate) -> 'TableScan':
        """Adds a filter, combined with the existing ones by and."""

    @abstractmethod
    def filter_expression(self) -> Optional[Predicate]:
        pass

    @abstractmethod
    def snapshot(self) -> Optional[Snapshot]:
        """The snapshot the scan resolves to, None for a table without snapshots."""

    @abstractmethod
    def schema(self) -> Schema:
        pass

    @abstractmethod
    def plan_files(self) -> CloseableIterable[FileScanTask]:
        pass

    @abstractmethod
    def plan_tasks(self) -> CloseableIterable[CombinedScanTask]:
        """
        Plans the task groups of the scan. The result holds resources until it is closed.
        """

    def __str__(self) -> str:
        filter_expression = self.filter_expression()
        return "{}(table={}, snapshot={}, filter={})".format(
            type(self).__name__, self.table(), self._snapshot_id_or_none(),
            filter_expression if filter_expression is not None else "true")

    def _snapshot_id_or_none(self) -> Optional[int]:
        snapshot = self.snapshot()
        return snapshot.snapshot_id if snapshot is not None else None
