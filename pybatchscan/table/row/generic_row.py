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

from typing import Any, List, Optional

from pybatchscan.schema.data_types import DataField
from pybatchscan.table.row.internal_row import InternalRow


class GenericRow(InternalRow):
    """A row that owns its values, used for partition tuples and constant columns."""

    def __init__(self, values: List[Any], fields: Optional[List[DataField]] = None):
        self.values = list(values)
        self.fields = fields

    def get_field(self, pos: int) -> Any:
        if pos >= len(self.values):
            raise IndexError(f"Position {pos} is out of bounds for row arity {len(self.values)}")
        return self.values[pos]

    def __len__(self) -> int:
        return len(self.values)

    def to_dict(self) -> dict:
        if self.fields is None:
            raise ValueError("Cannot convert a row without fields to a dict")
        return {field.name: self.values[i] for i, field in enumerate(self.fields)}

    def __eq__(self, other) -> bool:
        if isinstance(other, GenericRow):
            return self.values == other.values
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash(tuple(self.values))

    def __repr__(self) -> str:
        return f"GenericRow({self.values})"
