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

import os
import pickle
import shutil
import tempfile
import threading
import unittest

from pyarrow.fs import LocalFileSystem

from pybatchscan.common.closeable_iterable import CloseableIterable
from pybatchscan.common.file_io import FileIO
from pybatchscan.common.lazy import Lazy
from pybatchscan.table.row.generic_row import GenericRow
from pybatchscan.table.row.joined_row import JoinedRow
from pybatchscan.table.row.offset_row import OffsetRow
from pybatchscan.table.row.projected_row import ProjectedRow


class LazyTest(unittest.TestCase):

    def test_computes_once(self):
        calls = []
        lazy = Lazy(lambda: calls.append(1) or len(calls))
        self.assertFalse(lazy.is_initialized())
        self.assertEqual(1, lazy.get())
        self.assertEqual(1, lazy.get())
        self.assertTrue(lazy.is_initialized())
        self.assertEqual([1], calls)

    def test_failure_is_retried(self):
        attempts = []

        def supplier():
            attempts.append(1)
            if len(attempts) == 1:
                raise OSError("boom")
            return "ok"

        lazy = Lazy(supplier)
        with self.assertRaises(OSError):
            lazy.get()
        self.assertFalse(lazy.is_initialized())
        self.assertEqual("ok", lazy.get())

    def test_concurrent_get(self):
        started = threading.Event()
        calls = []

        def supplier():
            started.wait(5)
            calls.append(1)
            return object()

        lazy = Lazy(supplier)
        results = []
        threads = [threading.Thread(target=lambda: results.append(lazy.get())) for _ in range(4)]
        for t in threads:
            t.start()
        started.set()
        for t in threads:
            t.join()
        self.assertEqual([1], calls)
        self.assertEqual(1, len({id(r) for r in results}))


class CloseableIterableTest(unittest.TestCase):

    def test_close_runs_closer_once(self):
        closed = []
        iterable = CloseableIterable([1, 2, 3], lambda: closed.append(1))
        with iterable:
            self.assertEqual([1, 2, 3], list(iterable))
        iterable.close()
        self.assertTrue(iterable.closed)
        self.assertEqual([1], closed)
        with self.assertRaises(ValueError):
            iter(iterable)

    def test_transform_closes_source(self):
        closed = []
        source = CloseableIterable([1, 2], lambda: closed.append(1))
        doubled = source.transform(lambda x: x * 2)
        self.assertEqual([2, 4], list(doubled))
        doubled.close()
        self.assertTrue(source.closed)
        self.assertEqual([1], closed)

    def test_empty(self):
        with CloseableIterable.empty() as iterable:
            self.assertEqual([], list(iterable))
        self.assertEqual([5], list(CloseableIterable.with_no_op_close([5])))


class FileIOTest(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tempdir, "data.bin")
        with open(self.path, "wb") as f:
            f.write(b"0123456789")

    def tearDown(self):
        shutil.rmtree(self.tempdir, ignore_errors=True)

    def test_local_files(self):
        file_io = FileIO(self.tempdir)
        self.assertIsInstance(file_io.filesystem, LocalFileSystem)
        self.assertTrue(file_io.exists(self.path))
        self.assertTrue(file_io.exists("file://" + self.path))
        self.assertFalse(file_io.exists(os.path.join(self.tempdir, "missing")))
        self.assertEqual(10, file_io.get_file_size(self.path))

        input_file = file_io.new_input_file(self.path)
        self.assertEqual(self.path, input_file.location())
        self.assertEqual(10, input_file.get_length())
        with input_file.new_stream() as stream:
            stream.seek(4)
            self.assertEqual(b"456", stream.read(3))

    def test_known_length_is_not_looked_up(self):
        input_file = FileIO(self.tempdir).new_input_file(os.path.join(self.tempdir, "missing"), 42)
        self.assertEqual(42, input_file.get_length())

    def test_filesystem_paths(self):
        file_io = FileIO(self.tempdir)
        self.assertEqual("/tmp/a/b", file_io.to_filesystem_path("file:///tmp//a/b"))
        self.assertEqual("relative/path", file_io.to_filesystem_path("relative/path"))
        self.assertEqual(("s3", "bucket", "bucket/key"), FileIO.parse_location("s3://bucket/key"))

    def test_unknown_scheme(self):
        with self.assertRaises(ValueError):
            FileIO("hdfs://namenode/warehouse")

    def test_pickle(self):
        restored = pickle.loads(pickle.dumps(FileIO(self.tempdir)))
        self.assertEqual(self.tempdir, restored.path)
        self.assertIsInstance(restored.filesystem, LocalFileSystem)
        self.assertEqual(10, restored.get_file_size(self.path))


class RowTest(unittest.TestCase):

    def test_offset_row_is_reused(self):
        row = OffsetRow(None, 1, 2)
        first = row.replace((0, "a", "b"))
        self.assertEqual(("a", "b"), first.to_tuple())
        second = row.replace((0, "c", "d"))
        self.assertIs(first, second)
        self.assertEqual(("c", "d"), first.to_tuple())
        with self.assertRaises(ValueError):
            row.replace((0, "a"))
        with self.assertRaises(IndexError):
            row.get_field(2)

    def test_projected_row(self):
        projected = ProjectedRow([2, -1, 0]).replace_row(GenericRow(["a", "b", "c"]))
        self.assertEqual(("c", None, "a"), projected.to_tuple())
        self.assertEqual(3, len(projected))
        self.assertEqual("(c, None, a)", str(GenericRow(list(projected.to_tuple()))))

    def test_joined_row(self):
        joined = JoinedRow(GenericRow([1, 2]), GenericRow(["x"]))
        self.assertEqual((1, 2, "x"), joined.to_tuple())
        joined.replace_left(GenericRow([3]))
        self.assertEqual((3, "x"), joined.to_tuple())
        self.assertEqual(GenericRow([3, "x"]), joined)

    def test_generic_row(self):
        row = GenericRow([1, None])
        self.assertTrue(row.is_null_at(1))
        self.assertEqual(row, GenericRow([1, None]))
        self.assertEqual(hash(row), hash(GenericRow([1, None])))
        with self.assertRaises(ValueError):
            row.to_dict()
        with self.assertRaises(IndexError):
            row.get_field(2)


if __name__ == '__main__':
    unittest.main()
