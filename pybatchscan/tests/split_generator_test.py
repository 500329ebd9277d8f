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

import unittest

from pybatchscan.common.options import Options
from pybatchscan.common.options.config import TableProperties
from pybatchscan.read.scan_task import DataTask, FileScanTask
from pybatchscan.read.scanner.split_generator import SplitGenerator
from pybatchscan.table.data_file import DataFile, FileFormat
from pybatchscan.table.partition_spec import PartitionSpec
from pybatchscan.table.row.generic_row import GenericRow

MB = 1024 * 1024


def _task(name: str, size: int, file_format: FileFormat = FileFormat.PARQUET, split_offsets=None) -> FileScanTask:
    data_file = DataFile(f"/warehouse/{name}", file_format, GenericRow([]), 100, size, split_offsets=split_offsets)
    return FileScanTask(data_file, PartitionSpec.unpartitioned(), 0, size)


def _layout(groups):
    return [[(t.file.file_path.rsplit("/", 1)[-1], t.start, t.length) for t in group] for group in groups]


class SplitGeneratorTest(unittest.TestCase):

    def test_table_defaults(self):
        options = Options({})
        self.assertEqual(128 * MB, options.get(TableProperties.SPLIT_SIZE))
        self.assertEqual(10, options.get(TableProperties.SPLIT_LOOKBACK))
        self.assertEqual(4 * MB, options.get(TableProperties.SPLIT_OPEN_FILE_COST))

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            SplitGenerator(0, 10, 0)
        with self.assertRaises(ValueError):
            SplitGenerator(100, 0, 0)
        with self.assertRaises(ValueError):
            SplitGenerator(100, 10, -1)

    def test_splittable_file_is_cut_into_fixed_ranges(self):
        splits = SplitGenerator(100, 10, 0).split_files([_task("a.avro", 250, FileFormat.AVRO)])
        self.assertEqual([(0, 100), (100, 100), (200, 50)], [(s.start, s.length) for s in splits])

    def test_split_offsets_are_respected(self):
        task = _task("a.parquet", 300, split_offsets=[4, 100, 180, 260])
        splits = SplitGenerator(150, 10, 0).split_files([task])
        self.assertEqual([(4, 96), (100, 80), (180, 120)], [(s.start, s.length) for s in splits])

    def test_invalid_split_offsets_are_ignored(self):
        task = _task("a.parquet", 300, split_offsets=[4, 500])
        splits = SplitGenerator(200, 10, 0).split_files([task])
        self.assertEqual([(0, 200), (200, 100)], [(s.start, s.length) for s in splits])

    def test_orc_without_offsets_stays_whole(self):
        splits = SplitGenerator(100, 10, 0).split_files([_task("a.orc", 1000, FileFormat.ORC)])
        self.assertEqual([(0, 1000)], [(s.start, s.length) for s in splits])

    def test_data_task_is_never_split(self):
        task = DataTask.of("/warehouse#files-1", [])
        self.assertEqual([task], SplitGenerator(1, 10, 0).split_files([task]))

    def test_small_files_are_packed_together(self):
        tasks = [_task(f"{i}.parquet", 10) for i in range(4)]
        groups = SplitGenerator(30, 10, 0).create_task_groups(tasks)
        self.assertEqual([
            [("0.parquet", 0, 10), ("1.parquet", 0, 10), ("2.parquet", 0, 10)],
            [("3.parquet", 0, 10)],
        ], _layout(groups))

    def test_open_file_cost_is_the_minimum_weight(self):
        tasks = [_task(f"{i}.parquet", 10) for i in range(4)]
        groups = SplitGenerator(30, 10, 15).create_task_groups(tasks)
        self.assertEqual([2, 2], [len(group) for group in groups])

    def test_lookback_limits_open_bins(self):
        sizes = [60, 60, 60, 40, 40, 40]
        tasks = [_task(f"{i}.parquet", size) for i, size in enumerate(sizes)]

        wide = SplitGenerator(100, 3, 0).create_task_groups(tasks)
        self.assertEqual([[0, 3], [1, 4], [2, 5]], [[int(n) for n, _, _ in g] for g in self._names(wide)])

        narrow = SplitGenerator(100, 1, 0).create_task_groups(tasks)
        self.assertEqual([[0], [1], [2, 3], [4, 5]], [[int(n) for n, _, _ in g] for g in self._names(narrow)])

    @staticmethod
    def _names(groups):
        return [[(t.file.file_path.rsplit("/", 1)[-1].split(".")[0], t.start, t.length) for t in g] for g in groups]


if __name__ == '__main__':
    unittest.main()
