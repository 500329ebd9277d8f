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

from typing import Any, Generic, Optional, Type, TypeVar

T = TypeVar('T')


class ConfigOption(Generic[T]):
    """
    A typed configuration key of a scan or a table. Options are built through ConfigOptions and
    never change once built: with_description returns a new option.
    """

    def __init__(self, key: str, value_type: Type[T], default: Optional[T] = None, description: str = ""):
        if not key:
            raise ValueError("Key must not be null.")
        self._key = key
        self._value_type = value_type
        self._default = default
        self._description = description

    def key(self) -> str:
        return self._key

    def value_type(self) -> Type[T]:
        return self._value_type

    def default_value(self) -> Optional[T]:
        """The value used when the option is not set, None when the option has no default."""
        return self._default

    def has_default_value(self) -> bool:
        return self._default is not None

    def description(self) -> str:
        return self._description

    def with_description(self, description: str) -> 'ConfigOption[T]':
        return ConfigOption(self._key, self._value_type, self._default, description)

    def __eq__(self, other: Any) -> bool:
        return (isinstance(other, ConfigOption) and self._key == other._key
                and self._value_type is other._value_type and self._default == other._default)

    def __hash__(self) -> int:
        return hash((self._key, self._default))

    def __str__(self) -> str:
        return f"key: '{self._key}'; default_value: {self._default}"
