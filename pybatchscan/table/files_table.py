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

from typing import Dict, List, Optional

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.common.file_io import FileIO
from pybatchscan.encryption.encryption_manager import EncryptionManager
from pybatchscan.read.base_table_scan import BaseTableScan, TableScanContext
from pybatchscan.read.scan_task import DataTask, FileScanTask
from pybatchscan.schema.data_types import AtomicType, DataField
from pybatchscan.schema.schema import Schema
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.table.row.generic_row import GenericRow
from pybatchscan.table.snapshot import Snapshot
from pybatchscan.table.table import Table

FILES_SCHEMA = Schema([
    DataField(1, "file_path", AtomicType("STRING", nullable=False)),
    DataField(2, "file_format", AtomicType("STRING", nullable=False)),
    DataField(3, "record_count", AtomicType("BIGINT", nullable=False)),
    DataField(4, "file_size_in_bytes", AtomicType("BIGINT", nullable=False)),
])


class FilesTable(Table):
    """Metadata table listing the data files of a snapshot of another table."""

    def __init__(self, base: Table):
        self.base = base

    def name(self) -> str:
        return f"{self.base.name()}.files"

    def location(self) -> str:
        return self.base.location()

    def schema(self) -> Schema:
        return FILES_SCHEMA

    def spec(self) -> PartitionSpec:
        return PartitionSpec.unpartitioned()

    def properties(self) -> Dict[str, str]:
        return self.base.properties()

    def io(self) -> FileIO:
        return self.base.io()

    def encryption(self) -> EncryptionManager:
        return self.base.encryption()

    def new_scan(self) -> 'FilesTableScan':
        return FilesTableScan(self)

    def current_snapshot(self) -> Optional[Snapshot]:
        return self.base.current_snapshot()

    def snapshot(self, snapshot_id: int) -> Optional[Snapshot]:
        return self.base.snapshot(snapshot_id)

    def snapshots(self) -> List[Snapshot]:
        return self.base.snapshots()


class FilesTableScan(BaseTableScan):
    """Plans a single task that produces one row per data file, filtered in memory."""

    def _new_refined_scan(self, table, context: TableScanContext) -> 'FilesTableScan':
        return FilesTableScan(table, context)

    def plan_files(self) -> CloseableIterable[FileScanTask]:
        snapshot = self.snapshot()
        if snapshot is None:
            return CloseableIterable.empty()

        row_filter = self.bound_filter()
        rows = []
        for data_file in snapshot.data_files:
            row = GenericRow([
                data_file.file_path,
                data_file.file_format.value,
                data_file.record_count,
                data_file.file_size_in_bytes,
            ], FILES_SCHEMA.fields)
            if row_filter is None or row_filter.test(row):
                rows.append(row)

        location = f"{self._table.location()}#files-{snapshot.snapshot_id}"
        return CloseableIterable.with_no_op_close([DataTask.of(location, rows)])
