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

from dataclasses import dataclass
from typing import Optional

from pybatchscan.read.table_scan import TableScan


@dataclass(frozen=True)
class CacheKey:
    """
    Identifies the physical plan of a scan: two scans with equal keys plan the same task groups.
    The projection is not part of the key, task planning does not depend on it.
    """

    table_identity: str
    snapshot_id: Optional[int]
    split_size: Optional[int]
    filter_expression: str
    case_sensitive: bool

    @staticmethod
    def from_scan(scan: TableScan, split_size: Optional[int]) -> 'CacheKey':
        snapshot = scan.snapshot()
        filter_expression = scan.filter_expression()
        return CacheKey(
            table_identity=scan.table().identity(),
            snapshot_id=snapshot.snapshot_id if snapshot is not None else None,
            split_size=split_size,
            filter_expression=str(filter_expression) if filter_expression is not None else "true",
            case_sensitive=scan.is_case_sensitive())
