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
from collections import deque
from typing import Dict, Iterator, List, Optional

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.common.file_io import FileIO, InputFile
from pybatchscan.encryption.encryption_manager import EncryptedInputFile, EncryptionManager
from pybatchscan.read.reader.format_reader_dispatch import FormatReaderDispatch
from pybatchscan.read.scan_task import CombinedScanTask, FileScanTask
from pybatchscan.read.schema_reconciler import SchemaReconciler
from pybatchscan.schema.schema import Schema
from pybatchscan.table.row.internal_row import InternalRow

logger = logging.getLogger(__name__)


class TaskDataReader:
    """
    Reads the rows of a task group, one task after the other. The files of the group are decrypted
    in one batch up front; the first task is opened eagerly and the following ones only when the
    previous one is exhausted.

    The row returned by current() may be reused by the next call to advance(): copy it with
    InternalRow.to_tuple() to keep it.
    """

    def __init__(self,
                 task_group: CombinedScanTask,
                 table_schema: Schema,
                 expected_schema: Schema,
                 meta_columns: List[str],
                 file_io: FileIO,
                 encryption_manager: EncryptionManager,
                 case_sensitive: bool):
        self._reconciler = SchemaReconciler(table_schema, expected_schema, meta_columns, case_sensitive)
        self._dispatch = FormatReaderDispatch(table_schema)
        self._file_io = file_io
        self._encryption_manager = encryption_manager
        self._case_sensitive = case_sensitive
        self._tasks = deque(task_group.files())
        self._input_files: Optional[Dict[str, InputFile]] = self._batch_decrypt(task_group.files())

        self._current_iterable: Optional[CloseableIterable[InternalRow]] = None
        self._current_iterator: Optional[Iterator[InternalRow]] = None
        self._current_row: Optional[InternalRow] = None
        try:
            if self._tasks:
                self._open(self._tasks.popleft())
        except Exception:
            self._input_files = None
            raise

    def _batch_decrypt(self, tasks) -> Dict[str, InputFile]:
        encrypted_files = []
        seen = set()
        for task in tasks:
            path = task.file.file_path
            if task.is_data_task() or path in seen:
                continue
            seen.add(path)
            encrypted_files.append(EncryptedInputFile(self._file_io.new_input_file(path), task.file.key_metadata))
        if not encrypted_files:
            return {}
        return {decrypted.location(): decrypted for decrypted in self._encryption_manager.decrypt(encrypted_files)}

    def _open(self, task: FileScanTask):
        input_file = None
        if not task.is_data_task():
            input_file = self._input_files.get(task.file.file_path)
            if input_file is None:
                raise RuntimeError("Could not find InputFile associated with FileScanTask")
        read_plan = self._reconciler.plan(task)
        rows = self._dispatch.open_task(input_file, task, read_plan.read_schema, self._case_sensitive)
        try:
            iterable = read_plan.assemble(task, rows)
            iterator = iter(iterable)
        except Exception:
            rows.close()
            raise
        self._current_iterable = iterable
        self._current_iterator = iterator

    def advance(self) -> bool:
        """Moves to the next row, opening the next task when the current one is exhausted."""
        while True:
            if self._current_iterator is not None:
                row = next(self._current_iterator, None)
                if row is not None:
                    self._current_row = row
                    return True
                self._current_iterable.close()
                self._current_iterable = None
                self._current_iterator = None
            if not self._tasks:
                self._current_row = None
                return False
            self._open(self._tasks.popleft())

    def current(self) -> InternalRow:
        if self._current_row is None:
            raise ValueError("No current row, call advance() first")
        return self._current_row

    def close(self):
        """Closes the open task and drops the remaining tasks without opening them."""
        if self._current_iterable is not None:
            self._current_iterable.close()
            self._current_iterable = None
            self._current_iterator = None
        self._current_row = None
        skipped = len(self._tasks)
        self._tasks.clear()
        if skipped:
            logger.debug("Closed reader with %d unopened tasks", skipped)

    release = close

    def __iter__(self) -> Iterator[InternalRow]:
        while self.advance():
            yield self.current()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
