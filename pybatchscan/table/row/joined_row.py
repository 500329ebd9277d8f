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

from typing import Any, Optional

from pybatchscan.table.row.internal_row import InternalRow


class JoinedRow(InternalRow):
    """
    Concatenates two rows, the fields of the second row follow the fields of the first.
    Both sides can be replaced, so one instance serves all rows of a task.
    """

    def __init__(self, row1: Optional[InternalRow] = None, row2: Optional[InternalRow] = None):
        self.row1 = row1
        self.row2 = row2

    def replace(self, row1: InternalRow, row2: InternalRow) -> 'JoinedRow':
        self.row1 = row1
        self.row2 = row2
        return self

    def replace_left(self, row1: InternalRow) -> 'JoinedRow':
        self.row1 = row1
        return self

    def get_field(self, pos: int) -> Any:
        left_arity = len(self.row1)
        if pos < left_arity:
            return self.row1.get_field(pos)
        return self.row2.get_field(pos - left_arity)

    def __len__(self) -> int:
        return len(self.row1) + len(self.row2)
