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
from typing import Dict, Optional, Sequence

import fastavro
import pyarrow as pa
import pyarrow.compute as pc
import pyarrow.parquet as pq
from pyarrow import orc

from pybatchscan.schema.data_types import PyarrowFieldParser
from pybatchscan.schema.schema import Schema
from pybatchscan.table.data_file import DataFile, FileFormat
from pybatchscan.table.row.generic_row import GenericRow


def row_group_starts(path: str):
    metadata = pq.ParquetFile(path).metadata
    starts = []
    for i in range(metadata.num_row_groups):
        column = metadata.row_group(i).column(0)
        if column.has_dictionary_page and column.dictionary_page_offset:
            starts.append(column.dictionary_page_offset)
        else:
            starts.append(column.data_page_offset)
    return starts


def write_data_file(directory: str,
                    file_name: str,
                    table_schema: Schema,
                    data: pa.Table,
                    file_format: FileFormat,
                    partition: Sequence = (),
                    row_group_size: Optional[int] = None,
                    key_metadata: Optional[bytes] = None,
                    avro_sync_interval: int = 16000) -> DataFile:
    """Writes the data in the given format and describes the file the way a table commit would."""
    path = os.path.join(directory, file_name)
    split_offsets = None
    if file_format == FileFormat.PARQUET:
        pq.write_table(data, path, row_group_size=row_group_size)
        split_offsets = row_group_starts(path)
    elif file_format == FileFormat.ORC:
        orc.write_table(data, path)
    elif file_format == FileFormat.AVRO:
        avro_schema = PyarrowFieldParser.to_avro_schema(data.schema)
        with open(path, 'wb') as out:
            fastavro.writer(out, avro_schema, data.to_pylist(), sync_interval=avro_sync_interval)
    else:
        raise ValueError(f"Cannot write {file_format}")

    null_counts: Dict[int, int] = {}
    lower_bounds = {}
    upper_bounds = {}
    for name in data.column_names:
        field = table_schema.find_field(name)
        if field is None:
            continue
        column = data.column(name)
        null_counts[field.id] = column.null_count
        if column.null_count < len(column):
            min_max = pc.min_max(column)
            lower_bounds[field.id] = min_max['min'].as_py()
            upper_bounds[field.id] = min_max['max'].as_py()

    return DataFile(
        file_path=path,
        file_format=file_format,
        partition=GenericRow(list(partition)),
        record_count=data.num_rows,
        file_size_in_bytes=os.path.getsize(path),
        key_metadata=key_metadata,
        null_value_counts=null_counts,
        lower_bounds=lower_bounds,
        upper_bounds=upper_bounds,
        split_offsets=split_offsets)
