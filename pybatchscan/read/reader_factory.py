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

from pybatchscan.read.read_task import ReadTask
from pybatchscan.read.task_data_reader import TaskDataReader


class ReaderFactory:
    """Creates the row reader of an input partition planned by a batch scan."""

    def create_reader(self, partition) -> TaskDataReader:
        if not isinstance(partition, ReadTask):
            raise TypeError(f"Unknown input partition type: {type(partition).__name__}")
        return TaskDataReader(
            partition.task_group,
            partition.table_schema(),
            partition.expected_schema(),
            partition.meta_columns,
            partition.file_io,
            partition.encryption_manager,
            partition.case_sensitive)
