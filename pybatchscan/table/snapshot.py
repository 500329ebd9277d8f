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
from typing import List, Optional

from pybatchscan.table.data_file import DataFile


@dataclass
class Snapshot:
    """An immutable version of a table: the data files live at that point in time."""

    snapshot_id: int
    timestamp_millis: int
    data_files: List[DataFile] = field(default_factory=list)
    parent_id: Optional[int] = None
    schema_id: Optional[int] = None


class SnapshotManager:
    """Looks up snapshots of a table, kept in commit order."""

    def __init__(self, snapshots: List[Snapshot]):
        self.snapshots = sorted(snapshots, key=lambda s: s.timestamp_millis)
        self._by_id = {s.snapshot_id: s for s in self.snapshots}

    def get_latest_snapshot(self) -> Optional[Snapshot]:
        return self.snapshots[-1] if self.snapshots else None

    def get_snapshot_by_id(self, snapshot_id: int) -> Optional[Snapshot]:
        return self._by_id.get(snapshot_id)

    def earlier_or_equal_time_millis(self, timestamp: int) -> Optional[Snapshot]:
        """
        Find the latest snapshot with timestamp_millis <= the given timestamp.

        Returns:
            The snapshot, or None if every snapshot is newer than the timestamp
        """
        earliest = 0
        latest = len(self.snapshots) - 1
        final_snapshot = None

        while earliest <= latest:
            mid = earliest + (latest - earliest) // 2
            snapshot = self.snapshots[mid]
            commit_time = snapshot.timestamp_millis

            if commit_time > timestamp:
                latest = mid - 1
            else:
                final_snapshot = snapshot
                earliest = mid + 1

        return final_snapshot
