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
from typing import Dict, Iterable, Optional, Tuple

from pybatchscan.common.options import Options
from pybatchscan.common.options.config import ScanOptions
from pybatchscan.common.predicate import Predicate
from pybatchscan.schema.schema import Schema


@dataclass(frozen=True)
class ScanConfig:
    """The logical scan request: what to read from which snapshot, and how to size the splits."""

    table: object
    expected_schema: Schema
    case_sensitive: bool = True
    meta_columns: Tuple[str, ...] = ()
    filters: Tuple[Predicate, ...] = ()
    snapshot_id: Optional[int] = None
    as_of_timestamp: Optional[int] = None
    split_size: Optional[int] = None
    split_lookback: Optional[int] = None
    split_open_file_cost: Optional[int] = None
    options: Dict[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if self.snapshot_id is not None and self.as_of_timestamp is not None:
            raise ValueError("Cannot scan using both snapshot-id and as-of-timestamp to select the table snapshot")

    @staticmethod
    def create(table,
               expected_schema: Optional[Schema] = None,
               options: Optional[Dict[str, str]] = None,
               case_sensitive: bool = True,
               meta_columns: Iterable[str] = (),
               filters: Iterable[Predicate] = ()) -> 'ScanConfig':
        """
        Builds the config from read options. Option keys are matched regardless of case; split
        options left unset fall back to the table properties when planning.
        """
        scan_options = Options.case_insensitive(options)
        return ScanConfig(
            table=table,
            expected_schema=expected_schema if expected_schema is not None else table.schema(),
            case_sensitive=case_sensitive,
            meta_columns=tuple(meta_columns),
            filters=tuple(filters),
            snapshot_id=scan_options.get(ScanOptions.SNAPSHOT_ID),
            as_of_timestamp=scan_options.get(ScanOptions.AS_OF_TIMESTAMP),
            split_size=scan_options.get(ScanOptions.SPLIT_SIZE),
            split_lookback=scan_options.get(ScanOptions.LOOKBACK),
            split_open_file_cost=scan_options.get(ScanOptions.FILE_OPEN_COST),
            options=dict(scan_options.to_map()))
