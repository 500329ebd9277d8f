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

import pickle
import shutil
import tempfile
import unittest

import pyarrow as pa
from parameterized import parameterized

from pybatchscan.common.predicate import Predicate
from pybatchscan.read.reader_factory import ReaderFactory
from pybatchscan.schema.data_types import AtomicType, DataField
from pybatchscan.schema.schema import Schema
from pybatchscan.table.data_file import FileFormat
from pybatchscan.table.files_table import FilesTable
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.table.static_table import StaticTable
from pybatchscan.tests.data_writer import write_data_file

ALL_FORMATS = [(FileFormat.PARQUET,), (FileFormat.ORC,), (FileFormat.AVRO,)]

SCHEMA = Schema([
    DataField(1, "id", AtomicType("BIGINT")),
    DataField(2, "region", AtomicType("STRING")),
    DataField(3, "value", AtomicType("DOUBLE")),
])


def _rows(arrow_table: pa.Table):
    return sorted(zip(*[arrow_table.column(name).to_pylist() for name in arrow_table.column_names]))


class BatchScanTest(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.tempdir = tempfile.mkdtemp()
        cls.spec = PartitionSpec.builder_for(SCHEMA).identity("region").build()
        cls.tables = {}
        for (file_format,) in ALL_FORMATS:
            table = StaticTable(f"db.events_{file_format.value}", f"{cls.tempdir}/{file_format.value}",
                                SCHEMA, cls.spec)
            table.commit(cls._write_files(file_format, "first", 0), 1000)
            cls.tables[file_format] = table

    @classmethod
    def _write_files(cls, file_format: FileFormat, prefix: str, first_id: int):
        files = []
        for i, region in enumerate(["us", "eu"]):
            ids = [first_id + 3 * i + j for j in (1, 2, 3)]
            data = pa.Table.from_pydict({
                "id": ids,
                "region": [region] * 3,
                "value": [float(v) for v in ids],
            }, schema=SCHEMA.to_pyarrow_schema())
            files.append(write_data_file(cls.tempdir, f"{prefix}-{region}.{file_format.value}", SCHEMA, data,
                                         file_format, partition=[region]))
        return files

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(cls.tempdir, ignore_errors=True)

    def _builder(self, file_format: FileFormat, options=None):
        return self.tables[file_format].new_scan_builder(options)

    @parameterized.expand(ALL_FORMATS)
    def test_read_all(self, file_format):
        scan = self._builder(file_format).build()
        self.assertEqual(["id", "region", "value"], scan.read_schema().field_names())
        self.assertEqual([
            (1, "us", 1.0), (2, "us", 2.0), (3, "us", 3.0),
            (4, "eu", 4.0), (5, "eu", 5.0), (6, "eu", 6.0),
        ], _rows(scan.to_arrow()))

    @parameterized.expand(ALL_FORMATS)
    def test_projection_with_file_column(self, file_format):
        scan = self._builder(file_format).with_projection(["value", "region"]).with_metadata_columns("_file").build()
        self.assertEqual(["value", "region", "_file"], scan.read_schema().field_names())
        paths = {f.file_path: f.partition.get_field(0) for f in self.tables[file_format].current_snapshot().data_files}
        rows = _rows(scan.to_arrow())
        self.assertEqual(6, len(rows))
        for value, region, path in rows:
            self.assertEqual(paths[path], region)

    @parameterized.expand(ALL_FORMATS)
    def test_partition_filter_prunes_files(self, file_format):
        builder = self._builder(file_format)
        scan = builder.with_filter(builder.new_predicate_builder().equal("region", "eu")).build()
        self.assertEqual(1, sum(len(group) for group in scan.tasks()))
        self.assertEqual(3, scan.estimate_statistics().num_rows)
        self.assertEqual([(4, "eu", 4.0), (5, "eu", 5.0), (6, "eu", 6.0)], _rows(scan.to_arrow()))

    @parameterized.expand(ALL_FORMATS)
    def test_filter_on_read_column(self, file_format):
        builder = self._builder(file_format)
        scan = builder.with_filter(builder.new_predicate_builder().greater_than("id", 4)).build()
        self.assertEqual([(5, "eu", 5.0), (6, "eu", 6.0)], _rows(scan.to_arrow()))

    def test_parquet_residual_on_filter_only_column(self):
        builder = self._builder(FileFormat.PARQUET)
        scan = builder.with_projection(["value"]) \
            .with_filter(builder.new_predicate_builder().greater_or_equal("id", 5)) \
            .build()
        self.assertEqual([(5.0,), (6.0,)], _rows(scan.to_arrow()))

    def test_case_insensitive_scan(self):
        scan = self._builder(FileFormat.PARQUET) \
            .case_sensitive(False) \
            .with_projection(["ID"]) \
            .with_filter(Predicate(method='equal', index=None, field='REGION', literals=['eu'])) \
            .build()
        self.assertEqual([(4,), (5,), (6,)], _rows(scan.to_arrow()))

    def test_to_pandas(self):
        df = self._builder(FileFormat.AVRO).with_projection(["id", "value"]).build().to_pandas()
        self.assertEqual(["id", "value"], list(df.columns))
        self.assertEqual([1, 2, 3, 4, 5, 6], sorted(df["id"].tolist()))

    def test_estimate_statistics(self):
        table = self.tables[FileFormat.ORC]
        statistics = self._builder(FileFormat.ORC).build().estimate_statistics()
        data_files = table.current_snapshot().data_files
        self.assertEqual(sum(f.file_size_in_bytes for f in data_files), statistics.size_in_bytes)
        self.assertEqual(6, statistics.num_rows)

    def test_description(self):
        builder = self._builder(FileFormat.PARQUET)
        scan = builder.with_filter(builder.new_predicate_builder().equal("region", "eu")).build()
        self.assertEqual("db.events_parquet [filters=equal(region, 'eu')]", scan.description())
        self.assertTrue(str(scan).startswith("BatchScan(table=db.events_parquet, type=struct<"))
        self.assertTrue(str(scan).endswith("filters=equal(region, 'eu'), caseSensitive=True)"))

    def test_input_partitions_survive_pickling(self):
        scan = self._builder(FileFormat.PARQUET, {"split-size": "1", "file-open-cost": "0"}) \
            .with_metadata_columns("_file").build()
        partitions = scan.plan_input_partitions()
        self.assertEqual(len(scan.tasks()), len(partitions))
        self.assertEqual(2, len(partitions))

        reader_factory = pickle.loads(pickle.dumps(scan.create_reader_factory()))
        rows = []
        for partition in pickle.loads(pickle.dumps(partitions)):
            self.assertEqual(str(SCHEMA), str(partition.table_schema()))
            with reader_factory.create_reader(partition) as reader:
                rows.extend(row.to_tuple()[:3] for row in reader)
        self.assertEqual(_rows(self._builder(FileFormat.PARQUET).build().to_arrow()), sorted(rows))

    def test_reader_factory_rejects_unknown_partitions(self):
        with self.assertRaises(TypeError):
            ReaderFactory().create_reader(object())

    def test_snapshot_options(self):
        table = StaticTable("db.history", f"{self.tempdir}/history", SCHEMA, self.spec)
        table.commit(self._write_files(FileFormat.PARQUET, "history-1", 0), 1000)
        table.commit(self._write_files(FileFormat.PARQUET, "history-2", 100), 2000)

        self.assertEqual(12, len(_rows(table.new_scan_builder().build().to_arrow())))
        self.assertEqual(6, len(_rows(table.new_scan_builder({"snapshot-id": "1"}).build().to_arrow())))
        self.assertEqual(6, len(_rows(table.new_scan_builder({"as-of-timestamp": "1999"}).build().to_arrow())))
        with self.assertRaises(ValueError):
            table.new_scan_builder({"snapshot-id": "1", "as-of-timestamp": "1999"}).build()

    def test_files_metadata_table(self):
        table = self.tables[FileFormat.ORC]
        files_table = FilesTable(table)
        builder = files_table.new_scan_builder()
        scan = builder.with_projection(["file_format", "record_count"]) \
            .with_filter(builder.new_predicate_builder().greater_than("record_count", 0)) \
            .build()
        self.assertEqual([("orc", 3), ("orc", 3)], _rows(scan.to_arrow()))
        self.assertEqual(2, scan.estimate_statistics().num_rows)
        self.assertEqual(0, scan.estimate_statistics().size_in_bytes)


if __name__ == '__main__':
    unittest.main()
