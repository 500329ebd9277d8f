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

import pyarrow as pa
from pyarrow import RecordBatch

from pybatchscan.schema.schema import Schema


class FileColumnMapping:
    """
    Resolves the fields of a read schema against the column names of one data file, by name.
    Fields the file does not have are read as nulls.
    """

    def __init__(self, read_schema: Schema, file_names: List[str], case_sensitive: bool):
        self.read_schema = read_schema
        self.pa_schema = read_schema.to_pyarrow_schema()

        def key(name: str) -> str:
            return name if case_sensitive else name.lower()

        by_key: Dict[str, str] = {}
        for name in file_names:
            by_key.setdefault(key(name), name)
        self.file_columns: List[Optional[str]] = [by_key.get(key(f.name)) for f in read_schema.fields]
        self.existing_columns = [c for c in self.file_columns if c is not None]
        self.read_names = {c: f.name for c, f in zip(self.file_columns, read_schema.fields) if c is not None}
        # with no requested column in the file, one column is still read to count the rows
        self._row_count_column = file_names[0] if not self.existing_columns and file_names else None

    def columns_to_read(self) -> List[str]:
        if self._row_count_column is not None:
            return [self._row_count_column]
        return self.existing_columns

    def existing_read_names(self) -> List[str]:
        return [self.read_names[c] for c in self.existing_columns]

    def to_read_batch(self, file_batch: RecordBatch) -> RecordBatch:
        """Renames, reorders and null-fills the columns of a file batch into the read schema."""
        if len(self.read_schema) == 0:
            return file_batch.select([])
        arrays = []
        for file_column, pa_field in zip(self.file_columns, self.pa_schema):
            if file_column is None:
                arrays.append(pa.nulls(file_batch.num_rows, type=pa_field.type))
            else:
                arrays.append(file_batch.column(file_batch.schema.get_field_index(file_column)))
        return pa.RecordBatch.from_arrays(arrays, names=self.read_schema.field_names())

    @staticmethod
    def no_columns_batch(num_rows: int) -> RecordBatch:
        return pa.RecordBatch.from_arrays([pa.nulls(num_rows)], names=["_"]).select([])
