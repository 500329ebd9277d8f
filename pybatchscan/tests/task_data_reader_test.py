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
import shutil
import tempfile
import unittest
from decimal import Decimal
from typing import Iterable, List

import pyarrow as pa

from pybatchscan.common.exceptions import UnsupportedMetadataColumnException
from pybatchscan.common.file_io import FileIO, InputFile
from pybatchscan.common.predicate_builder import PredicateBuilder
from pybatchscan.encryption.encryption_manager import EncryptedInputFile, EncryptionManager
from pybatchscan.encryption.plaintext_encryption_manager import PlaintextEncryptionManager
from pybatchscan.read.scan_task import CombinedScanTask, FileScanTask
from pybatchscan.read.schema_reconciler import (DirectReadPlan, ExtraFilterColumnsReadPlan,
                                                JoinedPartitionReadPlan, SchemaReconciler)
from pybatchscan.read.task_data_reader import TaskDataReader
from pybatchscan.schema.data_types import AtomicType, DataField
from pybatchscan.schema.schema import Schema
from pybatchscan.table.data_file import FileFormat
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.tests.data_writer import write_data_file


class CountingFileIO(FileIO):

    def __init__(self, path: str):
        super().__init__(path)
        self.opened: List[str] = []
        self.streams = []

    def new_input_stream(self, path: str):
        self.opened.append(path)
        stream = super().new_input_stream(path)
        self.streams.append(stream)
        return stream


class CountingEncryptionManager(EncryptionManager):

    def __init__(self):
        self.batches: List[List[str]] = []

    def decrypt(self, encrypted_files: Iterable[EncryptedInputFile]) -> Iterable[InputFile]:
        encrypted_files = list(encrypted_files)
        self.batches.append([f.location() for f in encrypted_files])
        return [f.encrypted_input_file for f in encrypted_files]


class RelocatingEncryptionManager(EncryptionManager):

    def decrypt(self, encrypted_files: Iterable[EncryptedInputFile]) -> Iterable[InputFile]:
        return [RelocatedInputFile(f.encrypted_input_file) for f in encrypted_files]


class RelocatedInputFile(InputFile):

    def __init__(self, delegate: InputFile):
        self.delegate = delegate

    def location(self) -> str:
        return self.delegate.location() + ".decrypted"

    def get_length(self) -> int:
        return self.delegate.get_length()

    def new_stream(self):
        return self.delegate.new_stream()


class TaskDataReaderTest(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.tempdir = tempfile.mkdtemp()
        cls.table_schema = Schema([
            DataField(1, "id", AtomicType("BIGINT")),
            DataField(2, "region", AtomicType("STRING")),
            DataField(3, "value", AtomicType("DOUBLE")),
        ])
        cls.spec = PartitionSpec.builder_for(cls.table_schema).identity("region").build()
        file_pa_schema = pa.schema([("id", pa.int64()), ("value", pa.float64())])
        cls.files = []
        for i, region in enumerate(["us", "eu", "ap"]):
            data = pa.Table.from_pydict({
                "id": [2 * i + 1, 2 * i + 2],
                "value": [float(2 * i + 1), float(2 * i + 2)],
            }, schema=file_pa_schema)
            cls.files.append(write_data_file(cls.tempdir, f"part-{i}.parquet", cls.table_schema, data,
                                             FileFormat.PARQUET, partition=[region]))
        cls.tasks = [FileScanTask(f, cls.spec, 0, f.file_size_in_bytes) for f in cls.files]

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(cls.tempdir, ignore_errors=True)

    def setUp(self):
        self.file_io = CountingFileIO(self.tempdir)
        self.encryption = CountingEncryptionManager()

    def _reader(self, tasks, expected_schema=None, meta_columns=(), encryption=None):
        return TaskDataReader(
            CombinedScanTask(tuple(tasks)),
            self.table_schema,
            expected_schema if expected_schema is not None else self.table_schema,
            list(meta_columns),
            self.file_io,
            encryption if encryption is not None else self.encryption,
            True)

    def test_partition_and_file_columns_are_joined(self):
        with self._reader(self.tasks[:2], meta_columns=["_file"]) as reader:
            rows = [row.to_tuple() for row in reader]
        self.assertEqual([
            (1, "us", 1.0, self.files[0].file_path),
            (2, "us", 2.0, self.files[0].file_path),
            (3, "eu", 3.0, self.files[1].file_path),
            (4, "eu", 4.0, self.files[1].file_path),
        ], rows)

    def test_files_are_decrypted_in_one_batch(self):
        tasks = [self.tasks[0], self.tasks[1], self.tasks[0]]
        with self._reader(tasks) as reader:
            rows = [row.to_tuple() for row in reader]
        self.assertEqual(6, len(rows))
        self.assertEqual([[self.files[0].file_path, self.files[1].file_path]], self.encryption.batches)

    def test_tasks_are_opened_lazily(self):
        reader = self._reader(self.tasks)
        self.assertEqual([self.files[0].file_path], self.file_io.opened)
        rows = [row.to_tuple()[0] for row in reader]
        self.assertEqual([1, 2, 3, 4, 5, 6], rows)
        self.assertEqual([f.file_path for f in self.files], self.file_io.opened)
        reader.close()

    def test_release_skips_remaining_tasks(self):
        reader = self._reader(self.tasks)
        self.assertTrue(reader.advance())
        self.assertEqual(1, reader.current().get_field(0))
        self.assertTrue(reader.advance())
        self.assertEqual(2, reader.current().get_field(0))
        reader.release()

        self.assertFalse(reader.advance())
        self.assertEqual([self.files[0].file_path], self.file_io.opened)
        with self.assertRaises(ValueError):
            reader.current()

    def test_unsupported_metadata_column_fails_before_open(self):
        with self.assertRaises(UnsupportedMetadataColumnException) as e:
            self._reader(self.tasks, meta_columns=["_file", "_pos"])
        self.assertIsInstance(e.exception, ValueError)
        self.assertEqual(["_pos"], e.exception.columns)
        self.assertEqual([], self.file_io.opened)
        self.assertEqual([], self.encryption.batches)

    def test_decrypted_file_lookup_miss(self):
        with self.assertRaises(RuntimeError) as e:
            self._reader(self.tasks, encryption=RelocatingEncryptionManager())
        self.assertEqual("Could not find InputFile associated with FileScanTask", str(e.exception))
        self.assertEqual([], self.file_io.opened)

    def test_stream_is_closed_when_partition_value_is_invalid(self):
        table_schema = Schema([
            DataField(1, "id", AtomicType("BIGINT")),
            DataField(2, "d", AtomicType("DECIMAL(10, 2)")),
        ])
        spec = PartitionSpec.builder_for(table_schema).identity("d").build()
        data = pa.Table.from_pydict({"id": [1, 2]}, schema=pa.schema([("id", pa.int64())]))
        valid = write_data_file(self.tempdir, "valid-decimal.parquet", table_schema, data,
                                FileFormat.PARQUET, partition=[Decimal("1.5")])
        invalid = write_data_file(self.tempdir, "invalid-decimal.parquet", table_schema, data,
                                  FileFormat.PARQUET, partition=["not-a-number"])

        def reader(files):
            tasks = tuple(FileScanTask(f, spec, 0, f.file_size_in_bytes) for f in files)
            return TaskDataReader(CombinedScanTask(tasks), table_schema, table_schema, [],
                                  self.file_io, self.encryption, True)

        with self.assertRaises(decimal.InvalidOperation):
            reader([invalid])
        self.assertEqual(1, len(self.file_io.streams))
        self.assertTrue(self.file_io.streams[0].closed)

        later = reader([valid, invalid])
        self.assertTrue(later.advance())
        self.assertEqual((1, Decimal("1.50")), later.current().to_tuple())
        self.assertTrue(later.advance())
        self.assertEqual((2, Decimal("1.50")), later.current().to_tuple())
        with self.assertRaises(decimal.InvalidOperation):
            later.advance()
        self.assertEqual(3, len(self.file_io.streams))
        self.assertTrue(all(stream.closed for stream in self.file_io.streams))

    def test_empty_group(self):
        with self._reader([]) as reader:
            self.assertFalse(reader.advance())
        self.assertEqual([], self.encryption.batches)

    def test_plaintext_encryption_manager(self):
        reader = self._reader(self.tasks[2:], encryption=PlaintextEncryptionManager())
        self.assertEqual([(5, "ap", 5.0), (6, "ap", 6.0)], [row.to_tuple() for row in reader])


class SchemaReconcilerTest(unittest.TestCase):

    def setUp(self):
        self.table_schema = Schema([
            DataField(1, "id", AtomicType("BIGINT")),
            DataField(2, "region", AtomicType("STRING")),
            DataField(3, "value", AtomicType("DOUBLE")),
        ])
        self.spec = PartitionSpec.builder_for(self.table_schema).identity("region").build()

    @staticmethod
    def _task(spec, residual=None) -> FileScanTask:
        return FileScanTask(None, spec, 0, 0, residual)

    def test_direct_read_schema_is_output_schema(self):
        reconciler = SchemaReconciler(self.table_schema, self.table_schema, [], True)
        read_plan = reconciler.plan(self._task(PartitionSpec.unpartitioned()))
        self.assertIsInstance(read_plan, DirectReadPlan)
        self.assertEqual(self.table_schema.fields, read_plan.read_schema.fields)
        self.assertEqual([0, 1, 2], read_plan.index_mapping)

    def test_filter_only_columns_are_read(self):
        expected = self.table_schema.select(["value", "id"])
        residual = PredicateBuilder(self.table_schema.fields).equal("region", "us")
        reconciler = SchemaReconciler(self.table_schema, expected, [], True)
        read_plan = reconciler.plan(self._task(PartitionSpec.unpartitioned(), residual))
        self.assertIsInstance(read_plan, ExtraFilterColumnsReadPlan)
        self.assertEqual(["value", "id", "region"], read_plan.read_schema.field_names())
        self.assertEqual([0, 1], read_plan.index_mapping)

    def test_identity_partition_columns_are_joined(self):
        reconciler = SchemaReconciler(self.table_schema, self.table_schema, ["_file"], True)
        read_plan = reconciler.plan(self._task(self.spec))
        self.assertIsInstance(read_plan, JoinedPartitionReadPlan)
        self.assertEqual(["id", "value"], read_plan.read_schema.field_names())
        self.assertEqual(["id", "value", "region", "_file"], read_plan.iter_schema.field_names())
        self.assertEqual(["id", "region", "value", "_file"], reconciler.final_schema.field_names())
        self.assertEqual([0, 2, 1, 3], read_plan.index_mapping)

    def test_case_insensitive_required_schema(self):
        expected = Schema([DataField(1, "ID", AtomicType("BIGINT"))])
        residual = PredicateBuilder(self.table_schema.fields).greater_than("value", 1.0)
        reconciler = SchemaReconciler(self.table_schema, expected, [], False)
        self.assertEqual(["id", "value"], reconciler.required_schema(residual).field_names())

    def test_plans_are_reused(self):
        reconciler = SchemaReconciler(self.table_schema, self.table_schema, [], True)
        self.assertIs(reconciler.plan(self._task(self.spec)), reconciler.plan(self._task(self.spec)))

    def test_unknown_metadata_column(self):
        with self.assertRaises(ValueError):
            SchemaReconciler(self.table_schema, self.table_schema, ["_unknown"], True)


if __name__ == '__main__':
    unittest.main()
