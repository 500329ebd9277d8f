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

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

import pandas
import pyarrow

from pybatchscan.common.lazy import Lazy
from pybatchscan.common.predicate import Predicate
from pybatchscan.common.predicate_builder import PredicateBuilder
from pybatchscan.read.push_down_utils import split_and
from pybatchscan.read.read_task import ReadTask
from pybatchscan.read.reader_factory import ReaderFactory
from pybatchscan.read.scan_config import ScanConfig
from pybatchscan.read.scan_planner import ScanPlanner
from pybatchscan.read.scan_task import CombinedScanTask
from pybatchscan.schema.schema import Schema
from pybatchscan.table.metadata_columns import MetadataColumns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Statistics:
    size_in_bytes: int
    num_rows: int


class BatchScan:
    """
    A planned batch read of a table. The scan is planned once, on first use, and split into one
    input partition per task group; each partition is read by a reader from the reader factory,
    possibly in another process.
    """

    def __init__(self, config: ScanConfig, planner: Optional[ScanPlanner] = None):
        self.config = config
        self._planner = planner if planner is not None else ScanPlanner(config)
        self._read_schema: Lazy[Schema] = Lazy(self._create_read_schema)

    def table(self):
        return self.config.table

    def tasks(self) -> List[CombinedScanTask]:
        return self._planner.tasks()

    def _create_read_schema(self) -> Schema:
        meta_fields = MetadataColumns.metadata_fields(list(self.config.meta_columns))
        return self.config.expected_schema.join(Schema(meta_fields))

    def read_schema(self) -> Schema:
        """The schema of the rows returned by the readers: expected columns, then metadata columns."""
        return self._read_schema.get()

    def plan_input_partitions(self) -> List[ReadTask]:
        table = self.config.table
        table_schema_json = table.schema().to_json()
        expected_schema_json = self.config.expected_schema.to_json()
        read_tasks = [
            ReadTask(task_group, table_schema_json, expected_schema_json, list(self.config.meta_columns),
                     table.io(), table.encryption(), self.config.case_sensitive)
            for task_group in self.tasks()
        ]
        logger.debug("Planned %d input partitions for %s", len(read_tasks), table)
        return read_tasks

    def create_reader_factory(self) -> ReaderFactory:
        return ReaderFactory()

    def estimate_statistics(self) -> Statistics:
        size_in_bytes = 0
        num_rows = 0
        for task_group in self.tasks():
            for task in task_group.files():
                size_in_bytes += task.length
                num_rows += task.file.record_count
        return Statistics(size_in_bytes, num_rows)

    def description(self) -> str:
        filters = ", ".join(str(f) for f in self.config.filters)
        return "%s [filters=%s]" % (self.config.table, filters)

    def to_arrow_batch_reader(self) -> pyarrow.ipc.RecordBatchReader:
        schema = self.read_schema().to_pyarrow_schema()
        batch_iterator = self._arrow_batch_generator(schema)
        return pyarrow.ipc.RecordBatchReader.from_batches(schema, batch_iterator)

    def to_arrow(self) -> pyarrow.Table:
        """
        Reads every input partition. Filters on columns of the read schema are applied to the rows,
        the others were only used to prune files.
        """
        return self.to_arrow_batch_reader().read_all()

    def to_pandas(self) -> pandas.DataFrame:
        return self.to_arrow().to_pandas()

    def _arrow_batch_generator(self, schema: pyarrow.Schema) -> Iterator[pyarrow.RecordBatch]:
        chunk_size = 65536
        row_filter = self._read_schema_filter()
        reader_factory = self.create_reader_factory()

        for partition in self.plan_input_partitions():
            row_tuple_chunk = []
            with reader_factory.create_reader(partition) as reader:
                for row in reader:
                    if row_filter is not None and not row_filter.test(row):
                        continue
                    row_tuple_chunk.append(row.to_tuple())
                    if len(row_tuple_chunk) >= chunk_size:
                        yield self.convert_rows_to_arrow_batch(row_tuple_chunk, schema)
                        row_tuple_chunk = []
            if row_tuple_chunk:
                yield self.convert_rows_to_arrow_batch(row_tuple_chunk, schema)

    def _read_schema_filter(self) -> Optional[Predicate]:
        read_schema = self.read_schema()
        case_sensitive = self.config.case_sensitive
        conjuncts = []
        for predicate in self.config.filters:
            for conjunct in split_and(predicate):
                if all(read_schema.find_field(name, case_sensitive) is not None
                       for name in conjunct.referenced_fields()):
                    conjuncts.append(conjunct.bind(read_schema.field_names(), case_sensitive))
        return PredicateBuilder.and_predicates(conjuncts)

    @staticmethod
    def convert_rows_to_arrow_batch(row_tuples: List[tuple], schema: pyarrow.Schema) -> pyarrow.RecordBatch:
        columns_data = zip(*row_tuples)
        pydict = {name: list(column) for name, column in zip(schema.names, columns_data)}
        return pyarrow.RecordBatch.from_pydict(pydict, schema=schema)

    def __str__(self) -> str:
        filters = ", ".join(str(f) for f in self.config.filters)
        return "BatchScan(table=%s, type=%s, filters=%s, caseSensitive=%s)" % (
            self.config.table, self.config.expected_schema, filters, self.config.case_sensitive)
