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

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.common.predicate import Predicate
from pybatchscan.table.data_file import DataFile, FileFormat
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.table.row.generic_row import GenericRow
from pybatchscan.table.row.internal_row import InternalRow


@dataclass
class FileScanTask:
    """A byte range of one data file, with the part of the filter that still applies to its rows."""

    file: DataFile
    spec: PartitionSpec
    start: int
    length: int
    residual: Optional[Predicate] = None

    def is_data_task(self) -> bool:
        return False

    def as_data_task(self) -> 'DataTask':
        raise TypeError(f"Not a data task: {self.file.file_path}")


@dataclass
class DataTask(FileScanTask):
    """A task whose rows are produced in memory, in the row type of a metadata table."""

    rows_list: List[GenericRow] = field(default_factory=list)

    @staticmethod
    def of(location: str, rows: List[GenericRow]) -> 'DataTask':
        file = DataFile(
            file_path=location,
            file_format=FileFormat.METADATA,
            partition=GenericRow([]),
            record_count=len(rows),
            file_size_in_bytes=0)
        return DataTask(file=file, spec=PartitionSpec.unpartitioned(), start=0, length=0, rows_list=list(rows))

    def is_data_task(self) -> bool:
        return True

    def as_data_task(self) -> 'DataTask':
        return self

    def rows(self) -> CloseableIterable[InternalRow]:
        return CloseableIterable.with_no_op_close(self.rows_list)


@dataclass(frozen=True)
class CombinedScanTask:
    """A group of tasks read one after the other by a single reader."""

    tasks: Tuple[FileScanTask, ...]

    def files(self) -> Tuple[FileScanTask, ...]:
        return self.tasks

    def __iter__(self) -> Iterator[FileScanTask]:
        return iter(self.tasks)

    def __len__(self) -> int:
        return len(self.tasks)
