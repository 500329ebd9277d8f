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


class PlanningException(RuntimeError):
    """Planning the physical tasks of a scan failed"""

    def __init__(self, table_name: str, cause: Exception):
        self.table_name = table_name
        super().__init__(f"Failed to plan tasks for table {table_name}: {cause}")


class UnsupportedFormatException(ValueError):
    """The data file format has no reader"""

    def __init__(self, file_format):
        self.file_format = file_format
        super().__init__(f"Cannot read unsupported format: {file_format}")


class UnsupportedMetadataColumnException(ValueError):
    """A requested metadata column cannot be injected into task rows"""

    def __init__(self, columns):
        self.columns = list(columns)
        super().__init__(f"Unsupported metadata columns: only _file is supported, got {self.columns}")


class SnapshotNotFoundException(ValueError):
    """No snapshot matches the requested id or timestamp"""
