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

import sys
import unittest
from decimal import Decimal

from pybatchscan.read.partition_row_converter import PartitionRowConverter
from pybatchscan.schema.data_types import AtomicType, DataField
from pybatchscan.schema.schema import Schema
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.table.row.generic_row import GenericRow


class PartitionRowConverterTest(unittest.TestCase):

    def setUp(self):
        self.schema = Schema([
            DataField(1, "s", AtomicType("STRING")),
            DataField(2, "b", AtomicType("BYTES")),
            DataField(3, "d", AtomicType("DECIMAL(10, 2)")),
            DataField(4, "n", AtomicType("INT")),
            DataField(5, "other", AtomicType("STRING")),
        ])
        # partition tuple order differs from the schema order
        self.spec = PartitionSpec.builder_for(self.schema) \
            .identity("n").identity("s").identity("d").identity("b").build()
        self.partition_schema = self.schema.select_ids(self.spec.identity_source_ids())

    def test_values_are_converted_by_type(self):
        converter = PartitionRowConverter(self.partition_schema, self.spec)
        value = "".join(["pa", "rt"])
        row = converter.apply(GenericRow([7, value, Decimal("1.5"), bytearray(b"ab")]))

        self.assertEqual(["s", "b", "d", "n"], self.partition_schema.field_names())
        self.assertEqual(("part", b"ab", Decimal("1.50"), 7), row.to_tuple())
        self.assertIs(sys.intern("part"), row.get_field(0))
        self.assertIs(bytes, type(row.get_field(1)))
        self.assertEqual("1.50", str(row.get_field(2)))
        self.assertEqual({"s": "part", "b": b"ab", "d": Decimal("1.50"), "n": 7}, row.to_dict())

    def test_null_values_stay_null(self):
        converter = PartitionRowConverter(self.partition_schema, self.spec)
        row = converter.apply(GenericRow([None, None, None, None]))
        self.assertEqual((None, None, None, None), row.to_tuple())

    def test_wide_decimal_keeps_all_digits(self):
        schema = Schema([DataField(1, "d", AtomicType("DECIMAL(38, 2)"))])
        spec = PartitionSpec.builder_for(schema).identity("d").build()
        converter = PartitionRowConverter(schema, spec)

        row = converter.apply(GenericRow([Decimal("123456789012345678901234567890.1")]))
        self.assertEqual(Decimal("123456789012345678901234567890.10"), row.get_field(0))
        self.assertEqual("123456789012345678901234567890.10", str(row.get_field(0)))

    def test_subset_of_partition_columns(self):
        converter = PartitionRowConverter(self.schema.select_ids([4]), self.spec)
        self.assertEqual((7,), converter.apply(GenericRow([7, "x", Decimal("1"), b""])).to_tuple())

    def test_column_without_identity_partition_field(self):
        spec = PartitionSpec.builder_for(self.schema).bucket("n", 4).build()
        with self.assertRaises(ValueError):
            PartitionRowConverter(self.schema.select_ids([4]), spec)

    def test_empty_partition_schema(self):
        converter = PartitionRowConverter(Schema([]), PartitionSpec.unpartitioned())
        self.assertEqual(0, len(converter.apply(GenericRow([]))))


if __name__ == '__main__':
    unittest.main()
