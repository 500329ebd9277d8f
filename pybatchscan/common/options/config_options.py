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

from typing import Generic, Type, TypeVar

from pybatchscan.common.options.config_option import ConfigOption

T = TypeVar('T')


class ConfigOptions:
    """
    Entry point for declaring options:

        lookback = ConfigOptions.key("read.split.planning-lookback").int_type().default_value(10)
        snapshot_id = ConfigOptions.key("snapshot-id").long_type().no_default_value()
    """

    @staticmethod
    def key(key: str) -> 'ConfigOptions.OptionBuilder':
        if not key:
            raise ValueError("Key must not be None or empty.")
        return ConfigOptions.OptionBuilder(key)

    class OptionBuilder:
        """Picks the value type of the option being declared."""

        def __init__(self, key: str):
            self.key = key

        def _typed(self, value_type: Type[T]) -> 'ConfigOptions.TypedConfigOptionBuilder[T]':
            return ConfigOptions.TypedConfigOptionBuilder(self.key, value_type)

        def int_type(self) -> 'ConfigOptions.TypedConfigOptionBuilder[int]':
            return self._typed(int)

        def long_type(self) -> 'ConfigOptions.TypedConfigOptionBuilder[int]':
            # ints are unbounded, a long option converts like an int option
            return self._typed(int)

        def string_type(self) -> 'ConfigOptions.TypedConfigOptionBuilder[str]':
            return self._typed(str)

    class TypedConfigOptionBuilder(Generic[T]):

        def __init__(self, key: str, value_type: Type[T]):
            self.key = key
            self.value_type = value_type

        def default_value(self, value: T) -> ConfigOption[T]:
            return ConfigOption(self.key, self.value_type, value)

        def no_default_value(self) -> ConfigOption[T]:
            return ConfigOption(self.key, self.value_type)
