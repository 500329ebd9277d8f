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

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.common.exceptions import UnsupportedMetadataColumnException
from pybatchscan.common.predicate import Predicate
from pybatchscan.read.partition_row_converter import PartitionRowConverter
from pybatchscan.read.scan_task import FileScanTask
from pybatchscan.schema.schema import Schema
from pybatchscan.table.metadata_columns import MetadataColumns
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.table.row.generic_row import GenericRow
from pybatchscan.table.row.internal_row import InternalRow
from pybatchscan.table.row.joined_row import JoinedRow
from pybatchscan.table.row.projected_row import ProjectedRow


def projection(final_schema: Schema, iter_schema: Schema, case_sensitive: bool) -> List[int]:
    """Positions in iter_schema of the fields of final_schema, matched by name."""
    index_mapping = []
    for field in final_schema.fields:
        index = iter_schema.index_of(field.name, case_sensitive)
        if index < 0:
            raise ValueError(f"Cannot find field '{field.name}' in {iter_schema.field_names()}")
        index_mapping.append(index)
    return index_mapping


class ReadPlan(ABC):
    """
    How the rows of a task are produced: the schema the format reader reads, and how its rows
    become rows of the final schema.
    """

    def __init__(self, read_schema: Schema, iter_schema: Schema, final_schema: Schema, case_sensitive: bool):
        self.read_schema = read_schema
        self.iter_schema = iter_schema
        self.final_schema = final_schema
        self.index_mapping = projection(final_schema, iter_schema, case_sensitive)

    def assemble(self, task: FileScanTask, rows: CloseableIterable[InternalRow]) -> CloseableIterable[InternalRow]:
        projected = ProjectedRow(self.index_mapping)
        return self._iter_rows(task, rows).transform(projected.replace_row)

    @abstractmethod
    def _iter_rows(self, task: FileScanTask, rows: CloseableIterable[InternalRow]) -> CloseableIterable[InternalRow]:
        """Rows of the iter schema."""


class JoinedPartitionReadPlan(ReadPlan):
    """
    Identity partition columns are taken from the partition tuple of the file instead of being
    read, and metadata columns are derived from the task. Both are joined after the file columns.
    """

    def __init__(self, required_schema: Schema, final_schema: Schema, identity_ids, spec: PartitionSpec,
                 meta_schema: Schema, case_sensitive: bool):
        read_schema = required_schema.select_not(identity_ids)
        self.partition_schema = required_schema.select_ids(identity_ids)
        self.meta_schema = meta_schema
        self.converter = PartitionRowConverter(self.partition_schema, spec)
        iter_schema = read_schema.join(self.partition_schema.join(meta_schema))
        super().__init__(read_schema, iter_schema, final_schema, case_sensitive)

    def _iter_rows(self, task: FileScanTask, rows: CloseableIterable[InternalRow]) -> CloseableIterable[InternalRow]:
        partition = self.converter.apply(task.file.partition)
        meta = GenericRow([task.file.file_path] * len(self.meta_schema), self.meta_schema.fields)
        joined = JoinedRow(None, JoinedRow(partition, meta))
        return rows.transform(joined.replace_left)


class ExtraFilterColumnsReadPlan(ReadPlan):
    """Columns only referenced by the residual filter are read, then projected away."""

    def __init__(self, required_schema: Schema, final_schema: Schema, case_sensitive: bool):
        super().__init__(required_schema, required_schema, final_schema, case_sensitive)

    def _iter_rows(self, task: FileScanTask, rows: CloseableIterable[InternalRow]) -> CloseableIterable[InternalRow]:
        return rows


class DirectReadPlan(ReadPlan):
    """The file is read in the final schema."""

    def __init__(self, final_schema: Schema, case_sensitive: bool):
        super().__init__(final_schema, final_schema, final_schema, case_sensitive)

    def _iter_rows(self, task: FileScanTask, rows: CloseableIterable[InternalRow]) -> CloseableIterable[InternalRow]:
        return rows


class SchemaReconciler:
    """
    Decides per task which schema is read from the data file and how the read rows are completed
    into the final schema: the expected schema followed by the requested metadata columns.
    """

    def __init__(self, table_schema: Schema, expected_schema: Schema, meta_columns: List[str], case_sensitive: bool):
        meta_fields = MetadataColumns.metadata_fields(meta_columns)
        unsupported = [f.name for f in meta_fields if f.id != MetadataColumns.FILE_PATH.id]
        if unsupported:
            raise UnsupportedMetadataColumnException(unsupported)

        self.table_schema = table_schema
        self.expected_schema = expected_schema
        self.meta_schema = Schema(meta_fields)
        self.final_schema = expected_schema.join(self.meta_schema)
        self.case_sensitive = case_sensitive
        self._plans: Dict[Tuple[PartitionSpec, str], ReadPlan] = {}

    def required_schema(self, residual: Optional[Predicate]) -> Schema:
        """
        The table columns of the final schema, in order, followed by the columns only the residual
        filter references.
        """
        selected = []
        seen = set()
        for name in self.final_schema.field_names():
            field = self.table_schema.find_field(name, self.case_sensitive)
            if field is not None and field.id not in seen:
                selected.append(field)
                seen.add(field.id)
        if residual is not None:
            for name in sorted(residual.referenced_fields()):
                field = self.table_schema.find_field(name, self.case_sensitive)
                if field is not None and field.id not in seen:
                    selected.append(field)
                    seen.add(field.id)
        return Schema(selected)

    def plan(self, task: FileScanTask) -> ReadPlan:
        key = (task.spec, str(task.residual))
        read_plan = self._plans.get(key)
        if read_plan is None:
            read_plan = self._create_plan(task.spec, task.residual)
            self._plans[key] = read_plan
        return read_plan

    def _create_plan(self, spec: PartitionSpec, residual: Optional[Predicate]) -> ReadPlan:
        identity_ids = spec.identity_source_ids()
        required_schema = self.required_schema(residual)
        has_joined_partition_columns = len(identity_ids) > 0
        has_extra_filter_columns = len(required_schema) != len(self.final_schema)

        if has_joined_partition_columns or len(self.meta_schema) > 0:
            return JoinedPartitionReadPlan(required_schema, self.final_schema, identity_ids, spec,
                                           self.meta_schema, self.case_sensitive)
        elif has_extra_filter_columns:
            return ExtraFilterColumnsReadPlan(required_schema, self.final_schema, self.case_sensitive)
        return DirectReadPlan(self.final_schema, self.case_sensitive)
