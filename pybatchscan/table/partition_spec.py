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

from dataclasses import dataclass, field
from typing import List, Optional, Set

from pybatchscan.schema.schema import Schema

IDENTITY = "identity"


@dataclass(frozen=True)
class PartitionField:
    source_id: int
    field_id: int
    name: str
    transform: str = IDENTITY

    def is_identity(self) -> bool:
        return self.transform == IDENTITY


@dataclass(frozen=True)
class PartitionSpec:
    """How the rows of a table are grouped into partitions, derived from source columns."""

    fields: tuple = field(default_factory=tuple)

    @staticmethod
    def unpartitioned() -> 'PartitionSpec':
        return PartitionSpec(())

    @staticmethod
    def builder_for(schema: Schema) -> 'PartitionSpecBuilder':
        return PartitionSpecBuilder(schema)

    def identity_source_ids(self) -> Set[int]:
        return {f.source_id for f in self.fields if f.is_identity()}

    def identity_field_for(self, source_id: int) -> Optional[PartitionField]:
        return next((f for f in self.fields if f.is_identity() and f.source_id == source_id), None)

    def position_of(self, partition_field: PartitionField) -> int:
        return self.fields.index(partition_field)


class PartitionSpecBuilder:

    def __init__(self, schema: Schema):
        self.schema = schema
        self.fields: List[PartitionField] = []
        self.next_field_id = 1000

    def _add(self, source_name: str, name: str, transform: str) -> 'PartitionSpecBuilder':
        source = self.schema.find_field(source_name)
        if source is None:
            raise ValueError(f"Cannot find source column: {source_name}")
        if any(f.name == name for f in self.fields):
            raise ValueError(f"Cannot use partition name more than once: {name}")
        self.fields.append(PartitionField(source.id, self.next_field_id, name, transform))
        self.next_field_id += 1
        return self

    def identity(self, source_name: str) -> 'PartitionSpecBuilder':
        return self._add(source_name, source_name, IDENTITY)

    def bucket(self, source_name: str, num_buckets: int) -> 'PartitionSpecBuilder':
        return self._add(source_name, f"{source_name}_bucket", f"bucket[{num_buckets}]")

    def build(self) -> PartitionSpec:
        return PartitionSpec(tuple(self.fields))
