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

from abc import ABC, abstractmethod
from typing import Any


class InternalRow(ABC):
    """
    Base interface for a read-only row: a fixed number of positional values.
    """

    @abstractmethod
    def get_field(self, pos: int) -> Any:
        """
        Returns the value at the given position.
        """

    def is_null_at(self, pos: int) -> bool:
        return self.get_field(pos) is None

    @abstractmethod
    def __len__(self) -> int:
        """
        Returns the number of fields in this row.
        """

    def to_tuple(self) -> tuple:
        """Copies the values out of the row, so they survive reuse of the row object."""
        return tuple(self.get_field(pos) for pos in range(len(self)))

    def __eq__(self, other) -> bool:
        if not isinstance(other, InternalRow):
            return False
        return self.to_tuple() == other.to_tuple()

    __hash__ = None

    def __str__(self) -> str:
        return "({})".format(", ".join(str(self.get_field(pos)) for pos in range(len(self))))
