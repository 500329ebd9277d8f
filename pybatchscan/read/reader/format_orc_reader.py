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

from typing import List, Optional

from pyarrow import RecordBatch
from pyarrow import orc

from pybatchscan.common.file_io import InputFile
from pybatchscan.read.reader.file_column_mapping import FileColumnMapping
from pybatchscan.read.reader.iface.record_batch_reader import RecordBatchReader
from pybatchscan.read.scan_task import FileScanTask
from pybatchscan.schema.schema import Schema


class FormatOrcReader(RecordBatchReader):
    """
    Reads the stripes of an ORC file that start inside the byte range of a task, one batch per
    stripe. The residual filter is not pushed down.
    """

    def __init__(self, input_file: InputFile, task: FileScanTask, read_schema: Schema,
                 case_sensitive: bool, batch_size: int = 4096):
        self._stream = input_file.new_stream()
        try:
            self._orc_file = orc.ORCFile(self._stream)
            self._mapping = FileColumnMapping(read_schema, self._orc_file.schema.names, case_sensitive)
        except Exception:
            self._stream.close()
            raise
        self._stripes = self._select_stripes(task)
        self._next = 0

    def _select_stripes(self, task: FileScanTask) -> List[int]:
        offsets = task.file.split_offsets
        if offsets and len(offsets) == self._orc_file.nstripes:
            end = task.start + task.length
            return [i for i, offset in enumerate(offsets) if task.start <= offset < end]
        # without stripe offsets the file is only ever planned as one task
        return list(range(self._orc_file.nstripes)) if task.start == 0 else []

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        if self._next >= len(self._stripes):
            return None
        stripe = self._stripes[self._next]
        self._next += 1
        file_batch = self._orc_file.read_stripe(stripe, columns=self._mapping.columns_to_read())
        return self._mapping.to_read_batch(file_batch)

    def close(self):
        self._next = len(self._stripes)
        if self._stream is not None:
            self._stream.close()
            self._stream = None
