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
from enum import Enum
from typing import Any, Dict, List, Optional

from pybatchscan.table.row.generic_row import GenericRow


class FileFormat(Enum):
    PARQUET = "parquet"
    AVRO = "avro"
    ORC = "orc"
    # rows produced in memory by metadata tables, never stored in a file
    METADATA = "metadata"

    def is_splittable(self) -> bool:
        """Whether a file of this format can be cut at arbitrary byte offsets."""
        return self in (FileFormat.PARQUET, FileFormat.AVRO)


@dataclass
class DataFile:
    """Metadata of one data file: location, format, partition tuple and column stats keyed by field id."""

    file_path: str
    file_format: FileFormat
    partition: GenericRow
    record_count: int
    file_size_in_bytes: int
    key_metadata: Optional[bytes] = None
    null_value_counts: Dict[int, int] = field(default_factory=dict)
    lower_bounds: Dict[int, Any] = field(default_factory=dict)
    upper_bounds: Dict[int, Any] = field(default_factory=dict)
    split_offsets: Optional[List[int]] = None
