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

import logging
from abc import abstractmethod
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, Optional

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.common.exceptions import SnapshotNotFoundException
from pybatchscan.common.options import Options
from pybatchscan.common.options.config import TableProperties
from pybatchscan.common.predicate import Predicate
from pybatchscan.common.predicate_builder import PredicateBuilder
from pybatchscan.read.scan_task import CombinedScanTask, FileScanTask
from pybatchscan.read.scanner.split_generator import SplitGenerator
from pybatchscan.read.table_scan import TableScan
from pybatchscan.schema.schema import Schema
from pybatchscan.table.snapshot import Snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableScanContext:
    snapshot_id: Optional[int] = None
    case_sensitive: bool = True
    projected_schema: Optional[Schema] = None
    row_filter: Optional[Predicate] = None
    options: Dict[str, str] = field(default_factory=dict)


class BaseTableScan(TableScan):
    """Scan refinement and task planning shared by table scans; subclasses plan the file tasks."""

    def __init__(self, table, context: Optional[TableScanContext] = None):
        self._table = table
        self.context = context if context is not None else TableScanContext()

    @abstractmethod
    def _new_refined_scan(self, table, context: TableScanContext) -> 'BaseTableScan':
        pass

    def _refine(self, **changes) -> 'BaseTableScan':
        return self._new_refined_scan(self._table, replace(self.context, **changes))

    def table(self):
        return self._table

    def case_sensitive(self, case_sensitive: bool) -> 'BaseTableScan':
        return self._refine(case_sensitive=case_sensitive)

    def is_case_sensitive(self) -> bool:
        return self.context.case_sensitive

    def project(self, schema: Schema) -> 'BaseTableScan':
        return self._refine(projected_schema=schema)

    def use_snapshot(self, snapshot_id: int) -> 'BaseTableScan':
        if self.context.snapshot_id is not None:
            raise ValueError(f"Cannot override snapshot, already set to id={self.context.snapshot_id}")
        if self._table.snapshot(snapshot_id) is None:
            raise SnapshotNotFoundException(f"Cannot find snapshot with ID {snapshot_id}")
        return self._refine(snapshot_id=snapshot_id)

    def as_of_time(self, timestamp_millis: int) -> 'BaseTableScan':
        if self.context.snapshot_id is not None:
            raise ValueError(f"Cannot override snapshot, already set to id={self.context.snapshot_id}")
        snapshot = self._table.snapshot_as_of(timestamp_millis)
        if snapshot is None:
            raise SnapshotNotFoundException(f"Cannot find a snapshot older than {timestamp_millis}")
        return self._refine(snapshot_id=snapshot.snapshot_id)

    def option(self, key: str, value: str) -> 'BaseTableScan':
        options = dict(self.context.options)
        options[key] = value
        return self._refine(options=options)

    def filter(self, predicate: Predicate) -> 'BaseTableScan':
        combined = PredicateBuilder.and_predicates(
            [p for p in (self.context.row_filter, predicate) if p is not None])
        return self._refine(row_filter=combined)

    def filter_expression(self) -> Optional[Predicate]:
        return self.context.row_filter

    def snapshot(self) -> Optional[Snapshot]:
        if self.context.snapshot_id is not None:
            return self._table.snapshot(self.context.snapshot_id)
        return self._table.current_snapshot()

    def schema(self) -> Schema:
        if self.context.projected_schema is not None:
            return self.context.projected_schema
        return self._table.schema()

    def bound_filter(self) -> Optional[Predicate]:
        """The row filter resolved against the table schema, honoring case sensitivity."""
        if self.context.row_filter is None:
            return None
        return self.context.row_filter.bind(self._table.schema().field_names(), self.context.case_sensitive)

    def _split_options(self) -> Options:
        data = dict(self._table.properties())
        data.update(self.context.options)
        return Options(data)

    def plan_tasks(self) -> CloseableIterable[CombinedScanTask]:
        options = self._split_options()
        generator = SplitGenerator(
            options.get(TableProperties.SPLIT_SIZE),
            options.get(TableProperties.SPLIT_LOOKBACK),
            options.get(TableProperties.SPLIT_OPEN_FILE_COST))
        file_tasks = self.plan_files()
        return CloseableIterable(self._task_groups(generator, file_tasks), file_tasks.close)

    @staticmethod
    def _task_groups(generator: SplitGenerator,
                     file_tasks: CloseableIterable[FileScanTask]) -> Iterator[CombinedScanTask]:
        groups = generator.create_task_groups(file_tasks)
        logger.debug("Packed %d task groups", len(groups))
        yield from groups
