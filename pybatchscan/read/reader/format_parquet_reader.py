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
from typing import Any, Iterator, List, Optional

import pyarrow.dataset as ds
import pyarrow.parquet as pq
from pyarrow import RecordBatch

from pybatchscan.common.file_io import InputFile
from pybatchscan.read.push_down_utils import trim_predicate_by_fields
from pybatchscan.read.reader.file_column_mapping import FileColumnMapping
from pybatchscan.read.reader.iface.record_batch_reader import RecordBatchReader
from pybatchscan.read.scan_task import FileScanTask
from pybatchscan.schema.schema import Schema

logger = logging.getLogger(__name__)


class FormatParquetReader(RecordBatchReader):
    """
    Reads the row groups of a Parquet file that start inside the byte range of a task. Row groups
    whose column statistics cannot match the residual filter are skipped, and the rows of the
    remaining ones are filtered with the residual.
    """

    def __init__(self, input_file: InputFile, task: FileScanTask, read_schema: Schema,
                 case_sensitive: bool, batch_size: int = 4096):
        self._stream = input_file.new_stream()
        try:
            self._parquet_file = pq.ParquetFile(self._stream)
            self._mapping = FileColumnMapping(read_schema, self._parquet_file.schema_arrow.names, case_sensitive)
            self._residual = trim_predicate_by_fields(task.residual, self._mapping.existing_read_names())
            self._push_down_predicate = self._residual.to_arrow() if self._residual is not None else None
            row_groups = self._select_row_groups(task.start, task.start + task.length)
        except Exception:
            self._stream.close()
            raise

        logger.debug("Reading %d row groups of %s", len(row_groups), input_file.location())
        self._batches: Optional[Iterator[RecordBatch]] = None
        if row_groups:
            self._batches = self._parquet_file.iter_batches(
                batch_size=batch_size, row_groups=row_groups, columns=self._mapping.columns_to_read())

    def _select_row_groups(self, start: int, end: int) -> List[int]:
        metadata = self._parquet_file.metadata
        selected = []
        for i in range(metadata.num_row_groups):
            row_group = metadata.row_group(i)
            if row_group.num_columns == 0 or not start <= self._row_group_start(row_group) < end:
                continue
            if self._residual is not None and not self._row_group_may_match(row_group):
                continue
            selected.append(i)
        return selected

    @staticmethod
    def _row_group_start(row_group) -> int:
        first_column = row_group.column(0)
        if first_column.has_dictionary_page and first_column.dictionary_page_offset:
            return first_column.dictionary_page_offset
        return first_column.data_page_offset

    def _row_group_may_match(self, row_group) -> bool:
        min_values, max_values, null_counts = {}, {}, {}
        for i in range(row_group.num_columns):
            column = row_group.column(i)
            read_name = self._mapping.read_names.get(column.path_in_schema)
            statistics = column.statistics
            if read_name is None or statistics is None:
                continue
            if statistics.has_null_count:
                null_counts[read_name] = statistics.null_count
            if statistics.has_min_max:
                min_values[read_name] = statistics.min
                max_values[read_name] = statistics.max
        return self._residual.test_by_stats(min_values, max_values, null_counts, row_group.num_rows)

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        if self._batches is None:
            return None
        file_batch = next(self._batches, None)
        if file_batch is None:
            return None
        batch = self._mapping.to_read_batch(file_batch)
        if self._push_down_predicate is None:
            return batch
        return self._filter(batch, self._push_down_predicate)

    @staticmethod
    def _filter(batch: RecordBatch, predicate: Any) -> RecordBatch:
        scanner = ds.InMemoryDataset(batch).scanner(filter=predicate)
        filtered = scanner.to_table().combine_chunks()
        if filtered.num_rows == 0:
            return batch.slice(0, 0)
        return filtered.to_batches()[0]

    def close(self):
        self._batches = None
        if self._stream is not None:
            self._stream.close()
            self._stream = None
