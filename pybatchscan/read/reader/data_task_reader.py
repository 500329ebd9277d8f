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

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.read.scan_task import DataTask
from pybatchscan.schema.schema import Schema
from pybatchscan.table.row.internal_row import InternalRow
from pybatchscan.table.row.projected_row import ProjectedRow


class DataTaskReader:
    """Serves the in-memory rows of a data task, projected by name from the table row type."""

    def __init__(self, table_schema: Schema, read_schema: Schema, case_sensitive: bool):
        self.index_mapping = []
        for read_field in read_schema.fields:
            index = table_schema.index_of(read_field.name, case_sensitive)
            if index < 0:
                raise ValueError(f"Cannot find field '{read_field.name}' in {table_schema.field_names()}")
            self.index_mapping.append(index)

    def open(self, task: DataTask) -> CloseableIterable[InternalRow]:
        projected_row = ProjectedRow(self.index_mapping)
        rows = task.rows()
        return rows.transform(projected_row.replace_row)
