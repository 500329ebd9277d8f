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

import decimal
import sys
from decimal import Decimal
from typing import Any, Callable, List

from pybatchscan.schema.data_types import MAX_DECIMAL_PRECISION, AtomicType, DataType
from pybatchscan.schema.schema import Schema
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.table.row.generic_row import GenericRow
from pybatchscan.table.row.internal_row import InternalRow


class PartitionRowConverter:
    """
    Turns the partition tuple of a data file into the row of identity partition columns that is
    joined to every row read from the file. partition_schema holds the source columns of the
    identity partition fields.
    """

    def __init__(self, partition_schema: Schema, spec: PartitionSpec):
        self._positions: List[int] = []
        self._converters: List[Callable[[Any], Any]] = []
        for field in partition_schema.fields:
            partition_field = spec.identity_field_for(field.id)
            if partition_field is None:
                raise ValueError(f"Cannot find identity partition field for column {field.name} (id={field.id})")
            self._positions.append(spec.position_of(partition_field))
            self._converters.append(self._converter(field.type))
        self._fields = partition_schema.fields

    @staticmethod
    def _converter(data_type: DataType) -> Callable[[Any], Any]:
        root = data_type.root() if isinstance(data_type, AtomicType) else None
        if root in ('STRING', 'VARCHAR', 'CHAR'):
            return lambda value: sys.intern(str(value))
        if root in ('BYTES', 'BINARY', 'VARBINARY'):
            return bytes
        if root == 'DECIMAL':
            return PartitionRowConverter._decimal_converter(data_type)
        return lambda value: value

    @staticmethod
    def _decimal_converter(data_type: AtomicType) -> Callable[[Any], Decimal]:
        exponent = Decimal(1).scaleb(-data_type.decimal_scale())
        # quantize is bounded by the context precision, 28 digits by default
        precision = max(data_type.decimal_precision(), MAX_DECIMAL_PRECISION)

        def convert(value) -> Decimal:
            with decimal.localcontext() as context:
                context.prec = precision
                return Decimal(str(value) if isinstance(value, float) else value).quantize(exponent)
        return convert

    def apply(self, partition: InternalRow) -> GenericRow:
        values = []
        for position, converter in zip(self._positions, self._converters):
            value = partition.get_field(position)
            values.append(None if value is None else converter(value))
        return GenericRow(values, self._fields)
