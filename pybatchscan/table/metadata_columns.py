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

from typing import List

from pybatchscan.schema.data_types import AtomicType, DataField


class MetadataColumns:
    """
    Synthetic columns derived from the task being read rather than stored in data files.
    """

    FILE_PATH = DataField(2147483646, "_file", AtomicType("STRING", nullable=False),
                          "Path of the file in which a row is stored")
    ROW_POSITION = DataField(2147483645, "_pos", AtomicType("BIGINT", nullable=False),
                             "Ordinal position of a row in the source data file")

    META_COLUMNS = {
        FILE_PATH.name: FILE_PATH,
        ROW_POSITION.name: ROW_POSITION,
    }

    @staticmethod
    def metadata_column(name: str) -> DataField:
        meta_column = MetadataColumns.META_COLUMNS.get(name)
        if meta_column is None:
            raise ValueError(f"Unknown metadata column: {name}")
        return meta_column

    @staticmethod
    def metadata_fields(names: List[str]) -> List[DataField]:
        return [MetadataColumns.metadata_column(name) for name in names]
