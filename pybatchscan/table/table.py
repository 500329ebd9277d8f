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
from typing import Dict, List, Optional

from pybatchscan.common.file_io import FileIO
from pybatchscan.encryption.encryption_manager import EncryptionManager
from pybatchscan.read.scan_builder import ScanBuilder
from pybatchscan.read.table_scan import TableScan
from pybatchscan.schema.schema import Schema
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.table.snapshot import Snapshot, SnapshotManager


class Table(ABC):
    """A table: its schema, partitioning, snapshots and the capabilities needed to read its files."""

    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def location(self) -> str:
        pass

    @abstractmethod
    def schema(self) -> Schema:
        pass

    @abstractmethod
    def spec(self) -> PartitionSpec:
        pass

    @abstractmethod
    def properties(self) -> Dict[str, str]:
        pass

    @abstractmethod
    def io(self) -> FileIO:
        pass

    @abstractmethod
    def encryption(self) -> EncryptionManager:
        pass

    @abstractmethod
    def new_scan(self) -> TableScan:
        """Return a scan of the current snapshot with no projection and no filter."""

    @abstractmethod
    def current_snapshot(self) -> Optional[Snapshot]:
        pass

    @abstractmethod
    def snapshot(self, snapshot_id: int) -> Optional[Snapshot]:
        pass

    @abstractmethod
    def snapshots(self) -> List[Snapshot]:
        pass

    def snapshot_as_of(self, timestamp_millis: int) -> Optional[Snapshot]:
        """The snapshot that was current at the given time, None if the table is younger."""
        return SnapshotManager(self.snapshots()).earlier_or_equal_time_millis(timestamp_millis)

    def identity(self) -> str:
        """Identifies the table across handles: two handles of one table share it."""
        return f"{self.name()}@{self.location()}"

    def new_scan_builder(self, options: Optional[Dict[str, str]] = None) -> ScanBuilder:
        """Return a builder for a batch scan with the given read options."""
        return ScanBuilder(self, options)

    def __str__(self) -> str:
        return self.name()
