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

import operator
from abc import ABC, ABCMeta, abstractmethod
from dataclasses import dataclass
from functools import reduce
from typing import Any, Callable, ClassVar, Dict, List, Optional, Set

from pyarrow import compute as pyarrow_compute
from pyarrow import dataset as pyarrow_dataset

from pybatchscan.table.row.internal_row import InternalRow


@dataclass
class Predicate:
    """
    A filter over named columns. Leaf predicates carry the column name and its position
    in the row type they are evaluated against; 'and' / 'or' carry child predicates as
    their literals.
    """

    method: str
    index: Optional[int]
    field: Optional[str]
    literals: Optional[List[Any]] = None

    testers: ClassVar[Dict[str, Any]] = {}

    def new_literals(self, literals: List[Any]) -> 'Predicate':
        return Predicate(method=self.method, index=self.index, field=self.field, literals=literals)

    def is_compound(self) -> bool:
        return self.method in ('and', 'or')

    def referenced_fields(self) -> Set[str]:
        if not self.is_compound():
            return {self.field}
        fields = set()
        for child in self.literals:
            fields.update(child.referenced_fields())
        return fields

    def bind(self, field_names: List[str], case_sensitive: bool = True) -> 'Predicate':
        """
        Resolves the column of every leaf against the given field names, fixing the index and,
        for case insensitive resolution, the spelling of the name.
        """
        if self.is_compound():
            return self.new_literals([p.bind(field_names, case_sensitive) for p in self.literals])
        for i, name in enumerate(field_names):
            if name == self.field or (not case_sensitive and name.lower() == self.field.lower()):
                return Predicate(method=self.method, index=i, field=name, literals=self.literals)
        raise ValueError(f'The field {self.field} is not in field list {field_names}.')

    def test(self, record: InternalRow) -> bool:
        if self.method == 'and':
            return all(p.test(record) for p in self.literals)
        if self.method == 'or':
            return any(p.test(record) for p in self.literals)

        field_value = record.get_field(self.index)
        tester = Predicate.testers.get(self.method)
        if tester:
            return tester.test_by_value(field_value, self.literals)
        raise ValueError(f"Unsupported predicate method: {self.method}")

    def test_by_stats(self,
                      min_values: Dict[str, Any],
                      max_values: Dict[str, Any],
                      null_counts: Dict[str, int],
                      row_count: Optional[int]) -> bool:
        """
        Returns False only when no row described by the column stats can match. Stats are keyed by
        column name; a column without stats never prunes.
        """
        if self.method == 'and':
            return all(p.test_by_stats(min_values, max_values, null_counts, row_count) for p in self.literals)
        if self.method == 'or':
            return any(p.test_by_stats(min_values, max_values, null_counts, row_count) for p in self.literals)

        null_count = null_counts.get(self.field)
        if self.method == 'isNull':
            return null_count is None or null_count > 0
        if self.method == 'isNotNull':
            return null_count is None or row_count is None or null_count < row_count

        if null_count is not None and row_count is not None and null_count == row_count:
            # only nulls, which no comparison matches
            return False

        min_value = min_values.get(self.field)
        max_value = max_values.get(self.field)
        if min_value is None or max_value is None:
            return True

        tester = Predicate.testers.get(self.method)
        if tester is None:
            raise ValueError(f"Unsupported predicate method: {self.method}")
        try:
            return tester.test_by_stats(min_value, max_value, self.literals)
        except TypeError:
            # stats of a type the literal does not compare with
            return True

    def to_arrow(self) -> Any:
        if self.method == 'and':
            return reduce(lambda x, y: x & y, [p.to_arrow() for p in self.literals])
        if self.method == 'or':
            return reduce(lambda x, y: x | y, [p.to_arrow() for p in self.literals])

        field = pyarrow_dataset.field(self.field)
        tester = Predicate.testers.get(self.method)
        if tester:
            return tester.test_by_arrow(field, self.literals)
        raise ValueError("Unsupported predicate method: {}".format(self.method))

    def __str__(self) -> str:
        if self.is_compound():
            return "{}({})".format(self.method, ", ".join(str(p) for p in self.literals))
        if not self.literals:
            return "{}({})".format(self.method, self.field)
        return "{}({}, {})".format(self.method, self.field, ", ".join(repr(v) for v in self.literals))


class RegisterMeta(ABCMeta):
    def __init__(cls, name, bases, dct):
        super().__init__(name, bases, dct)
        if not bool(cls.__abstractmethods__):
            Predicate.testers[cls.name] = cls()


class Tester(ABC, metaclass=RegisterMeta):

    name = None

    @abstractmethod
    def test_by_value(self, val, literals) -> bool:
        """
        Test based on the specific val and literals. A null value never matches a comparison.
        """

    @abstractmethod
    def test_by_stats(self, min_v, max_v, literals) -> bool:
        """
        Whether a value between min_v and max_v, both inclusive, may match.
        """

    @abstractmethod
    def test_by_arrow(self, val, literals):
        """
        Build the arrow expression of the test on the given field expression.
        """


class Comparison(Tester, ABC):
    """A binary comparison against the first literal, evaluated with the same operator on values and arrow."""

    op: Callable[[Any, Any], Any] = None

    def test_by_value(self, val, literals) -> bool:
        return val is not None and self.op(val, literals[0])

    def test_by_arrow(self, val, literals):
        return self.op(val, literals[0])


class Equal(Comparison):
    name = 'equal'
    op = operator.eq

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return min_v <= literals[0] <= max_v


class NotEqual(Comparison):
    name = 'notEqual'
    op = operator.ne

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        # only a column holding nothing but the literal can be skipped
        return not (min_v == literals[0] == max_v)


class LessThan(Comparison):
    name = 'lessThan'
    op = operator.lt

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return min_v < literals[0]


class LessOrEqual(Comparison):
    name = 'lessOrEqual'
    op = operator.le

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return min_v <= literals[0]


class GreaterThan(Comparison):
    name = 'greaterThan'
    op = operator.gt

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return max_v > literals[0]


class GreaterOrEqual(Comparison):
    name = 'greaterOrEqual'
    op = operator.ge

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return max_v >= literals[0]


class In(Tester):
    name = 'in'

    def test_by_value(self, val, literals) -> bool:
        return val is not None and val in literals

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return any(min_v <= literal <= max_v for literal in literals)

    def test_by_arrow(self, val, literals):
        return val.isin(literals)


class NotIn(Tester):
    name = 'notIn'

    def test_by_value(self, val, literals) -> bool:
        return val is not None and val not in literals

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return not any(min_v == literal == max_v for literal in literals)

    def test_by_arrow(self, val, literals):
        return ~val.isin(literals)


class Between(Tester):
    name = 'between'

    def test_by_value(self, val, literals) -> bool:
        return val is not None and literals[0] <= val <= literals[1]

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return literals[0] <= max_v and min_v <= literals[1]

    def test_by_arrow(self, val, literals):
        return (val >= literals[0]) & (val <= literals[1])


class StringMatch(Tester, ABC):
    """A test of string values against a pattern; non-string values never match."""

    def test_by_value(self, val, literals) -> bool:
        return isinstance(val, str) and self.matches(val, literals[0])

    @abstractmethod
    def matches(self, val: str, pattern: str) -> bool:
        """Whether the string matches the pattern."""


class StartsWith(StringMatch):
    name = 'startsWith'

    def matches(self, val: str, pattern: str) -> bool:
        return val.startswith(pattern)

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        prefix = literals[0]
        return min_v[:len(prefix)] <= prefix <= max_v[:len(prefix)]

    def test_by_arrow(self, val, literals):
        return pyarrow_compute.starts_with(val, literals[0])


class EndsWith(StringMatch):
    name = 'endsWith'

    def matches(self, val: str, pattern: str) -> bool:
        return val.endswith(pattern)

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return True

    def test_by_arrow(self, val, literals):
        return pyarrow_compute.ends_with(val, literals[0])


class Contains(StringMatch):
    name = 'contains'

    def matches(self, val: str, pattern: str) -> bool:
        return pattern in val

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return True

    def test_by_arrow(self, val, literals):
        return pyarrow_compute.match_substring(val, literals[0])


class IsNull(Tester):
    name = 'isNull'

    def test_by_value(self, val, literals) -> bool:
        return val is None

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return True

    def test_by_arrow(self, val, literals):
        return val.is_null()


class IsNotNull(Tester):
    name = 'isNotNull'

    def test_by_value(self, val, literals) -> bool:
        return val is not None

    def test_by_stats(self, min_v, max_v, literals) -> bool:
        return True

    def test_by_arrow(self, val, literals):
        return val.is_valid()
