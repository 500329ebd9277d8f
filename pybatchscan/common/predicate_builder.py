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

from typing import Any, List, Optional

from pybatchscan.common.predicate import Predicate
from pybatchscan.schema.data_types import DataField


class PredicateBuilder:
    """
    Builds filter predicates over the columns of a table. Column names are resolved when the
    predicate is built, honoring case sensitivity, so a predicate always carries the column
    spelling and position of the row type it was built for.
    """

    def __init__(self, row_field: List[DataField], case_sensitive: bool = True):
        self.field_names = [field.name for field in row_field]
        self.case_sensitive = case_sensitive

    def _resolve(self, field: str):
        for index, name in enumerate(self.field_names):
            if name == field or (not self.case_sensitive and name.lower() == field.lower()):
                return index, name
        raise ValueError(f'The field {field} is not in field list {self.field_names}.')

    def _leaf(self, method: str, field: str, literals: Optional[List[Any]] = None) -> Predicate:
        index, name = self._resolve(field)
        return Predicate(method=method, index=index, field=name, literals=literals)

    def equal(self, field: str, literal: Any) -> Predicate:
        return self._leaf('equal', field, [literal])

    def not_equal(self, field: str, literal: Any) -> Predicate:
        return self._leaf('notEqual', field, [literal])

    def less_than(self, field: str, literal: Any) -> Predicate:
        return self._leaf('lessThan', field, [literal])

    def less_or_equal(self, field: str, literal: Any) -> Predicate:
        return self._leaf('lessOrEqual', field, [literal])

    def greater_than(self, field: str, literal: Any) -> Predicate:
        return self._leaf('greaterThan', field, [literal])

    def greater_or_equal(self, field: str, literal: Any) -> Predicate:
        return self._leaf('greaterOrEqual', field, [literal])

    def is_null(self, field: str) -> Predicate:
        return self._leaf('isNull', field)

    def is_not_null(self, field: str) -> Predicate:
        return self._leaf('isNotNull', field)

    def startswith(self, field: str, prefix: str) -> Predicate:
        return self._leaf('startsWith', field, [prefix])

    def endswith(self, field: str, suffix: str) -> Predicate:
        return self._leaf('endsWith', field, [suffix])

    def contains(self, field: str, substring: str) -> Predicate:
        return self._leaf('contains', field, [substring])

    def is_in(self, field: str, literals: List[Any]) -> Predicate:
        if not literals:
            raise ValueError(f"Cannot build an 'in' predicate on {field} without values")
        return self._leaf('in', field, list(literals))

    def is_not_in(self, field: str, literals: List[Any]) -> Predicate:
        if not literals:
            raise ValueError(f"Cannot build a 'not in' predicate on {field} without values")
        return self._leaf('notIn', field, list(literals))

    def between(self, field: str, lower: Any, upper: Any) -> Predicate:
        """Both bounds are inclusive."""
        return self._leaf('between', field, [lower, upper])

    @staticmethod
    def _combine(method: str, predicates: List[Predicate]) -> Optional[Predicate]:
        if not predicates:
            return None
        if len(predicates) == 1:
            return predicates[0]
        return Predicate(method=method, index=None, field=None, literals=list(predicates))

    @staticmethod
    def and_predicates(predicates: List[Predicate]) -> Optional[Predicate]:
        """The conjunction of the predicates, None when there is nothing to combine."""
        return PredicateBuilder._combine('and', predicates)

    @staticmethod
    def or_predicates(predicates: List[Predicate]) -> Optional[Predicate]:
        return PredicateBuilder._combine('or', predicates)
