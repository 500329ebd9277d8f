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
from typing import Dict, Iterator, List, Optional

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.common.file_io import FileIO
from pybatchscan.common.predicate import Predicate
from pybatchscan.encryption.encryption_manager import EncryptionManager
from pybatchscan.encryption.plaintext_encryption_manager import PlaintextEncryptionManager
from pybatchscan.read.base_table_scan import BaseTableScan, TableScanContext
from pybatchscan.read.push_down_utils import remove_conjuncts_on_fields, to_partition_predicate
from pybatchscan.read.scan_task import FileScanTask
from pybatchscan.schema.schema import Schema
from pybatchscan.table.data_file import DataFile
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.table.snapshot import Snapshot, SnapshotManager
from pybatchscan.table.table import Table

logger = logging.getLogger(__name__)


class StaticTable(Table):
    """
    A table whose snapshots are held in memory. Committing appends a new snapshot holding the
    files of the previous one plus the new files.
    """

    def __init__(self,
                 name: str,
                 location: str,
                 schema: Schema,
                 spec: Optional[PartitionSpec] = None,
                 properties: Optional[Dict[str, str]] = None,
                 file_io: Optional[FileIO] = None,
                 encryption_manager: Optional[EncryptionManager] = None,
                 snapshots: Optional[List[Snapshot]] = None):
        self._name = name
        self._location = location
        self._schema = schema
        self._spec = spec if spec is not None else PartitionSpec.unpartitioned()
        self._properties = dict(properties or {})
        self._file_io = file_io if file_io is not None else FileIO(location)
        self._encryption = encryption_manager if encryption_manager is not None else PlaintextEncryptionManager()
        self._snapshot_manager = SnapshotManager(list(snapshots or []))

    def name(self) -> str:
        return self._name

    def location(self) -> str:
        return self._location

    def schema(self) -> Schema:
        return self._schema

    def spec(self) -> PartitionSpec:
        return self._spec

    def properties(self) -> Dict[str, str]:
        return self._properties

    def io(self) -> FileIO:
        return self._file_io

    def encryption(self) -> EncryptionManager:
        return self._encryption

    def new_scan(self) -> 'StaticTableScan':
        return StaticTableScan(self)

    def current_snapshot(self) -> Optional[Snapshot]:
        return self._snapshot_manager.get_latest_snapshot()

    def snapshot(self, snapshot_id: int) -> Optional[Snapshot]:
        return self._snapshot_manager.get_snapshot_by_id(snapshot_id)

    def snapshots(self) -> List[Snapshot]:
        return list(self._snapshot_manager.snapshots)

    def snapshot_as_of(self, timestamp_millis: int) -> Optional[Snapshot]:
        return self._snapshot_manager.earlier_or_equal_time_millis(timestamp_millis)

    def commit(self, new_files: List[DataFile], timestamp_millis: int) -> Snapshot:
        """Appends the files in a new snapshot and returns it."""
        current = self.current_snapshot()
        if current is not None and timestamp_millis < current.timestamp_millis:
            raise ValueError(f"Snapshot time {timestamp_millis} is older than the current snapshot "
                             f"time {current.timestamp_millis}")
        files = (list(current.data_files) if current is not None else []) + list(new_files)
        snapshot = Snapshot(
            snapshot_id=(current.snapshot_id + 1) if current is not None else 1,
            timestamp_millis=timestamp_millis,
            data_files=files,
            parent_id=current.snapshot_id if current is not None else None)
        self._snapshot_manager = SnapshotManager(self._snapshot_manager.snapshots + [snapshot])
        logger.info("Committed snapshot %d of %s with %d files", snapshot.snapshot_id, self._name, len(files))
        return snapshot


class StaticTableScan(BaseTableScan):
    """Plans the data files of a static table snapshot, pruning by partition values and column stats."""

    def _new_refined_scan(self, table, context: TableScanContext) -> 'StaticTableScan':
        return StaticTableScan(table, context)

    def plan_files(self) -> CloseableIterable[FileScanTask]:
        snapshot = self.snapshot()
        if snapshot is None:
            return CloseableIterable.empty()

        row_filter = self.bound_filter()
        table_schema: Schema = self._table.schema()
        spec: PartitionSpec = self._table.spec()
        identity_sources = {}
        for position, partition_field in enumerate(spec.fields):
            if partition_field.is_identity():
                source_name = table_schema.find_field_by_id(partition_field.source_id).name
                identity_sources[source_name] = (partition_field.name, position)

        partition_filter = to_partition_predicate(row_filter, identity_sources)
        residual = remove_conjuncts_on_fields(row_filter, identity_sources.keys())
        return CloseableIterable.with_no_op_close(
            self._file_tasks(snapshot, spec, row_filter, partition_filter, residual))

    def _file_tasks(self,
                    snapshot: Snapshot,
                    spec: PartitionSpec,
                    row_filter: Optional[Predicate],
                    partition_filter: Optional[Predicate],
                    residual: Optional[Predicate]) -> Iterator[FileScanTask]:
        id_to_name = self._table.schema().id_to_name()
        for data_file in snapshot.data_files:
            if partition_filter is not None and not partition_filter.test(data_file.partition):
                logger.debug("Skipping %s by partition filter", data_file.file_path)
                continue
            if row_filter is not None and not self._may_match(row_filter, data_file, id_to_name):
                logger.debug("Skipping %s by column stats", data_file.file_path)
                continue
            yield FileScanTask(data_file, spec, 0, data_file.file_size_in_bytes, residual)

    @staticmethod
    def _may_match(row_filter: Predicate, data_file: DataFile, id_to_name: Dict[int, str]) -> bool:
        def by_name(values: Dict[int, object]) -> Dict[str, object]:
            return {id_to_name[field_id]: v for field_id, v in values.items() if field_id in id_to_name}

        return row_filter.test_by_stats(
            by_name(data_file.lower_bounds),
            by_name(data_file.upper_bounds),
            by_name(data_file.null_value_counts),
            data_file.record_count)
