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

from typing import Optional

import fastavro
import pyarrow as pa
from pyarrow import RecordBatch

from pybatchscan.common.file_io import InputFile
from pybatchscan.read.reader.file_column_mapping import FileColumnMapping
from pybatchscan.read.reader.iface.record_batch_reader import RecordBatchReader
from pybatchscan.read.scan_task import FileScanTask
from pybatchscan.schema.schema import Schema


class FormatAvroReader(RecordBatchReader):
    """
    An ArrowBatchReader for reading Avro files using fastavro. Reads the blocks that start inside the
    byte range of a task and converts their records to RecordBatch format.
    """

    def __init__(self, input_file: InputFile, task: FileScanTask, read_schema: Schema,
                 case_sensitive: bool, batch_size: int = 4096):
        self._file = input_file.new_stream()
        try:
            self._block_reader = fastavro.block_reader(self._file)
            file_names = [f["name"] for f in self._block_reader.writer_schema["fields"]]
        except Exception:
            self._file.close()
            raise
        self._mapping = FileColumnMapping(read_schema, file_names, case_sensitive)
        self._start = task.start
        self._end = task.start + task.length
        self._batch_size = batch_size
        self._records = iter(())
        self._past_end = False

    def _next_records(self) -> Optional[list]:
        records = []
        while len(records) < self._batch_size:
            record = next(self._records, None)
            if record is not None:
                records.append(record)
                continue
            block = self._next_block()
            if block is None:
                break
            self._records = iter(block)
        return records or None

    def _next_block(self):
        if self._past_end:
            return None
        for block in self._block_reader:
            if block.offset >= self._end:
                self._past_end = True
                return None
            if block.offset >= self._start:
                return block
        self._past_end = True
        return None

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        if self._file is None:
            return None
        records = self._next_records()
        if records is None:
            return None
        if len(self._mapping.read_schema) == 0:
            return FileColumnMapping.no_columns_batch(len(records))

        pydict_data = {}
        for file_column, read_field in zip(self._mapping.file_columns, self._mapping.read_schema.fields):
            if file_column is None:
                pydict_data[read_field.name] = [None] * len(records)
            else:
                pydict_data[read_field.name] = [record.get(file_column) for record in records]
        return pa.RecordBatch.from_pydict(pydict_data, self._mapping.pa_schema)

    def close(self):
        if self._file:
            self._file.close()
            self._file = None
