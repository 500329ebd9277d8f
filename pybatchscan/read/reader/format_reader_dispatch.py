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
from typing import Dict, Optional, Type

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.common.exceptions import UnsupportedFormatException
from pybatchscan.common.file_io import InputFile
from pybatchscan.read.reader.data_task_reader import DataTaskReader
from pybatchscan.read.reader.format_avro_reader import FormatAvroReader
from pybatchscan.read.reader.format_orc_reader import FormatOrcReader
from pybatchscan.read.reader.format_parquet_reader import FormatParquetReader
from pybatchscan.read.reader.iface.record_batch_reader import RecordBatchReader
from pybatchscan.read.scan_task import FileScanTask
from pybatchscan.schema.schema import Schema
from pybatchscan.table.data_file import FileFormat
from pybatchscan.table.row.internal_row import InternalRow

logger = logging.getLogger(__name__)

FORMAT_READERS: Dict[FileFormat, Type[RecordBatchReader]] = {
    FileFormat.PARQUET: FormatParquetReader,
    FileFormat.AVRO: FormatAvroReader,
    FileFormat.ORC: FormatOrcReader,
}


class FormatReaderDispatch:
    """
    Opens the rows of one task in the read schema, choosing the reader by the format of the
    task's file. Data tasks are served from memory and need no input file.
    """

    def __init__(self, table_schema: Schema, batch_size: int = 4096):
        self.table_schema = table_schema
        self.batch_size = batch_size

    def open_task(self,
                  input_file: Optional[InputFile],
                  task: FileScanTask,
                  read_schema: Schema,
                  case_sensitive: bool) -> CloseableIterable[InternalRow]:
        if task.is_data_task():
            return DataTaskReader(self.table_schema, read_schema, case_sensitive).open(task.as_data_task())

        file_format = task.file.file_format
        reader_class = FORMAT_READERS.get(file_format)
        if reader_class is None:
            raise UnsupportedFormatException(file_format.value)
        logger.debug("Opening %s [%d, %d) as %s", task.file.file_path, task.start,
                     task.start + task.length, file_format.value)
        reader = reader_class(input_file, task, read_schema, case_sensitive, self.batch_size)
        return CloseableIterable(reader, reader.close)
