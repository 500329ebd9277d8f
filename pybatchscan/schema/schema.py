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
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import pyarrow as pa

from pybatchscan.common.json_util import JSON, json_field
from pybatchscan.schema.data_types import DataField, PyarrowFieldParser


@dataclass
class Schema:
    """An ordered list of fields, each identified by a stable id."""

    FIELD_FIELDS = "fields"

    fields: List[DataField] = json_field(FIELD_FIELDS, default_factory=list)

    def __init__(self, fields: Optional[List[DataField]] = None):
        self.fields = list(fields) if fields is not None else []
        ids = [field.id for field in self.fields]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate field ids in schema: {ids}")

    @staticmethod
    def from_pyarrow_schema(pa_schema: pa.Schema, first_id: int = 1) -> 'Schema':
        return Schema(PyarrowFieldParser.to_data_fields(pa_schema, first_id))

    def to_pyarrow_schema(self) -> pa.Schema:
        return PyarrowFieldParser.from_data_fields(self.fields)

    def field_names(self) -> List[str]:
        return [field.name for field in self.fields]

    def field_ids(self) -> List[int]:
        return [field.id for field in self.fields]

    def find_field(self, name: str, case_sensitive: bool = True) -> Optional[DataField]:
        if case_sensitive:
            return next((f for f in self.fields if f.name == name), None)
        lowered = name.lower()
        return next((f for f in self.fields if f.name.lower() == lowered), None)

    def find_field_by_id(self, field_id: int) -> Optional[DataField]:
        return next((f for f in self.fields if f.id == field_id), None)

    def index_of(self, name: str, case_sensitive: bool = True) -> int:
        field = self.find_field(name, case_sensitive)
        if field is None:
            return -1
        return self.field_ids().index(field.id)

    def select(self, names: Iterable[str], case_sensitive: bool = True) -> 'Schema':
        """Projects the schema to the given column names, in the order they are given."""
        selected = []
        for name in names:
            field = self.find_field(name, case_sensitive)
            if field is None:
                raise ValueError(f"Cannot find field '{name}' in {self.field_names()}")
            selected.append(field)
        return Schema(selected)

    def select_ids(self, field_ids: Iterable[int]) -> 'Schema':
        """Projects the schema to the given field ids, keeping this schema's order."""
        wanted = set(field_ids)
        return Schema([f for f in self.fields if f.id in wanted])

    def select_not(self, field_ids: Iterable[int]) -> 'Schema':
        excluded = set(field_ids)
        return Schema([f for f in self.fields if f.id not in excluded])

    def join(self, other: 'Schema') -> 'Schema':
        return Schema(self.fields + other.fields)

    def id_to_name(self) -> Dict[int, str]:
        return {f.id: f.name for f in self.fields}

    def to_json(self) -> str:
        return JSON.to_json(self)

    @staticmethod
    def from_json(json_str: str) -> 'Schema':
        try:
            return JSON.from_json(json_str, Schema)
        except (KeyError, TypeError, ValueError) as e:
            raise RuntimeError(f"Failed to parse schema from JSON: {json_str}") from e

    def __len__(self) -> int:
        return len(self.fields)

    def __str__(self) -> str:
        return "struct<{}>".format(", ".join(str(f) for f in self.fields))
