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

from typing import Dict, Iterable, List, Optional, Set, Tuple

from pybatchscan.common.predicate import Predicate
from pybatchscan.common.predicate_builder import PredicateBuilder


def split_and(input_predicate: Optional[Predicate]) -> List[Predicate]:
    if not input_predicate:
        return []
    if input_predicate.method == 'and':
        result = []
        for child in input_predicate.literals:
            result.extend(split_and(child))
        return result
    return [input_predicate]


def get_all_fields(predicate: Predicate) -> Set[str]:
    return predicate.referenced_fields()


def trim_predicate_by_fields(input_predicate: Optional[Predicate], fields: Iterable[str]) -> Optional[Predicate]:
    """Keeps the conjuncts that can be evaluated with the given columns only."""
    available = set(fields)
    kept = [p for p in split_and(input_predicate) if get_all_fields(p).issubset(available)]
    return PredicateBuilder.and_predicates(kept)


def remove_conjuncts_on_fields(input_predicate: Optional[Predicate], fields: Iterable[str]) -> Optional[Predicate]:
    """Drops the conjuncts that reference nothing but the given columns."""
    removed = set(fields)
    kept = [p for p in split_and(input_predicate) if not get_all_fields(p).issubset(removed)]
    return PredicateBuilder.and_predicates(kept)


def to_partition_predicate(input_predicate: Optional[Predicate],
                           source_to_partition: Dict[str, Tuple[str, int]]) -> Optional[Predicate]:
    """
    Extracts the conjuncts on identity partition source columns and rewrites them against the
    partition tuple. source_to_partition maps a source column name to the partition field name
    and its position in the tuple.
    """
    if not input_predicate or not source_to_partition:
        return None
    predicates = [p for p in split_and(input_predicate) if get_all_fields(p).issubset(source_to_partition)]
    if not predicates:
        return None
    return _rename(PredicateBuilder.and_predicates(predicates), source_to_partition)


def _rename(input_predicate: Predicate, mapping: Dict[str, Tuple[str, int]]) -> Predicate:
    if input_predicate.is_compound():
        return input_predicate.new_literals([_rename(p, mapping) for p in input_predicate.literals])
    name, index = mapping[input_predicate.field]
    return Predicate(method=input_predicate.method, index=index, field=name, literals=input_predicate.literals)
