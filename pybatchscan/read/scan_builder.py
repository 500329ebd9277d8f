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

from typing import Dict, List, Optional, Union

from pybatchscan.common.predicate import Predicate
from pybatchscan.common.predicate_builder import PredicateBuilder
from pybatchscan.read.batch_scan import BatchScan
from pybatchscan.read.scan_config import ScanConfig
from pybatchscan.schema.schema import Schema


class ScanBuilder:
    """Collects the projection, filters and metadata columns of a batch scan of a table."""

    def __init__(self, table, options: Optional[Dict[str, str]] = None):
        self.table = table
        self.options = dict(options or {})
        self._case_sensitive = True
        self._projection: Optional[Union[Schema, List[str]]] = None
        self._filters: List[Predicate] = []
        self._meta_columns: List[str] = []

    def new_predicate_builder(self) -> PredicateBuilder:
        return PredicateBuilder(self.table.schema().fields, self._case_sensitive)

    def case_sensitive(self, case_sensitive: bool) -> 'ScanBuilder':
        self._case_sensitive = case_sensitive
        return self

    def with_filter(self, *predicates: Predicate) -> 'ScanBuilder':
        self._filters.extend(p for p in predicates if p is not None)
        return self

    def with_projection(self, projection: Union[Schema, List[str]]) -> 'ScanBuilder':
        """Projects the scan to a schema or to column names of the table, in the given order."""
        self._projection = projection
        return self

    def with_metadata_columns(self, *names: str) -> 'ScanBuilder':
        self._meta_columns.extend(names)
        return self

    def _expected_schema(self) -> Schema:
        if self._projection is None:
            return self.table.schema()
        if isinstance(self._projection, Schema):
            return self._projection
        return self.table.schema().select(self._projection, self._case_sensitive)

    def build(self) -> BatchScan:
        config = ScanConfig.create(
            self.table,
            expected_schema=self._expected_schema(),
            options=self.options,
            case_sensitive=self._case_sensitive,
            meta_columns=self._meta_columns,
            filters=self._filters)
        return BatchScan(config)
