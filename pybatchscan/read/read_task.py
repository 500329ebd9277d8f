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

from typing import List

from pybatchscan.common.file_io import FileIO
from pybatchscan.common.lazy import Lazy
from pybatchscan.encryption.encryption_manager import EncryptionManager
from pybatchscan.read.scan_task import CombinedScanTask
from pybatchscan.schema.schema import Schema


class ReadTask:
    """
    One input partition of a batch scan: a task group plus everything a worker needs to read it.
    Schemas travel as JSON and are parsed on first use on the worker side.
    """

    def __init__(self,
                 task_group: CombinedScanTask,
                 table_schema_json: str,
                 expected_schema_json: str,
                 meta_columns: List[str],
                 file_io: FileIO,
                 encryption_manager: EncryptionManager,
                 case_sensitive: bool):
        self.task_group = task_group
        self.table_schema_json = table_schema_json
        self.expected_schema_json = expected_schema_json
        self.meta_columns = list(meta_columns)
        self.file_io = file_io
        self.encryption_manager = encryption_manager
        self.case_sensitive = case_sensitive
        self._init_schemas()

    def _init_schemas(self):
        self._table_schema = Lazy(lambda: Schema.from_json(self.table_schema_json))
        self._expected_schema = Lazy(lambda: Schema.from_json(self.expected_schema_json))

    def table_schema(self) -> Schema:
        return self._table_schema.get()

    def expected_schema(self) -> Schema:
        return self._expected_schema.get()

    def __getstate__(self):
        state = self.__dict__.copy()
        del state['_table_schema']
        del state['_expected_schema']
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        self._init_schemas()

    def __repr__(self) -> str:
        return f"ReadTask(tasks={len(self.task_group)}, meta_columns={self.meta_columns})"
