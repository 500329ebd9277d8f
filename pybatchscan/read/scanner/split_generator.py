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

import collections
from dataclasses import replace
from typing import Callable, Iterable, List

from pybatchscan.read.scan_task import CombinedScanTask, FileScanTask


class SplitGenerator:
    """
    Cuts file tasks into byte ranges of at most the target split size and packs them into
    task groups, keeping `lookback` groups open to fill.
    """

    def __init__(self, target_split_size: int, lookback: int, open_file_cost: int):
        if target_split_size <= 0:
            raise ValueError(f"Invalid split size (negative or 0): {target_split_size}")
        if lookback <= 0:
            raise ValueError(f"Invalid split planning lookback (negative or 0): {lookback}")
        if open_file_cost < 0:
            raise ValueError(f"Invalid file open cost (negative): {open_file_cost}")
        self.target_split_size = target_split_size
        self.lookback = lookback
        self.open_file_cost = open_file_cost

    def create_task_groups(self, file_tasks: Iterable[FileScanTask]) -> List[CombinedScanTask]:
        split_tasks = self.split_files(file_tasks)
        packed = self._pack_with_lookback(
            split_tasks,
            lambda task: max(task.length, self.open_file_cost),
            self.target_split_size,
            self.lookback)
        return [CombinedScanTask(tuple(group)) for group in packed]

    def split_files(self, file_tasks: Iterable[FileScanTask]) -> List[FileScanTask]:
        result = []
        for task in file_tasks:
            result.extend(self._split(task))
        return result

    def _split(self, task: FileScanTask) -> List[FileScanTask]:
        if task.is_data_task():
            return [task]
        offsets = task.file.split_offsets
        if offsets and self._valid_offsets(offsets, task.file.file_size_in_bytes):
            return self._split_at_offsets(task, offsets)
        if task.file.file_format.is_splittable():
            return self._split_fixed(task)
        return [task]

    @staticmethod
    def _valid_offsets(offsets: List[int], file_size: int) -> bool:
        return all(a < b for a, b in zip(offsets, offsets[1:])) and 0 <= offsets[0] and offsets[-1] < file_size

    def _split_at_offsets(self, task: FileScanTask, offsets: List[int]) -> List[FileScanTask]:
        file_size = task.file.file_size_in_bytes
        sizes = [end - start for start, end in zip(offsets, offsets[1:] + [file_size])]
        splits = []
        idx = 0
        while idx < len(sizes):
            offset_idx = idx
            current_size = sizes[idx]
            # always consume at least one range
            idx += 1
            while idx < len(sizes) and current_size + sizes[idx] <= self.target_split_size:
                current_size += sizes[idx]
                idx += 1
            splits.append(replace(task, start=offsets[offset_idx], length=current_size))
        return splits

    def _split_fixed(self, task: FileScanTask) -> List[FileScanTask]:
        splits = []
        offset = task.start
        end = task.start + task.length
        while offset < end:
            length = min(self.target_split_size, end - offset)
            splits.append(replace(task, start=offset, length=length))
            offset += length
        return splits or [task]

    @staticmethod
    def _pack_with_lookback(
            items: List,
            weight_func: Callable,
            target_weight: int,
            lookback: int
    ) -> List[List]:
        """
        Pack items in order into bins of at most target weight. An item goes into the first open
        bin with room for it; when no bin has room a new one is opened, and once more than
        `lookback` bins are open the oldest is closed.
        """
        packed = []
        open_bins = collections.deque()

        for item in items:
            weight = weight_func(item)
            target = next((b for b in open_bins if b[1] + weight <= target_weight), None)
            if target is not None:
                target[0].append(item)
                target[1] += weight
                continue
            open_bins.append([[item], weight])
            if len(open_bins) > lookback:
                packed.append(open_bins.popleft()[0])

        packed.extend(b[0] for b in open_bins)
        return packed
