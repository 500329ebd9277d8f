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

from typing import Any, Optional

from pybatchscan.common.options.config_option import ConfigOption
from pybatchscan.common.options.options_utils import OptionsUtils


class Options:
    """A string keyed property map read through typed ConfigOptions."""

    def __init__(self, data: dict):
        self.data = data

    @classmethod
    def from_none(cls) -> 'Options':
        return cls({})

    @classmethod
    def case_insensitive(cls, data: Optional[dict]) -> 'Options':
        """Options whose keys match regardless of case, as scan options do."""
        return cls({str(k).lower(): v for k, v in (data or {}).items()})

    def to_map(self) -> dict:
        return self.data

    def get(self, option: ConfigOption, default: Any = None) -> Any:
        """
        The value of the option converted to its type. When the option is not set, the given
        default is returned, or the option's own default when no default is given.
        """
        raw_value = self.data.get(option.key())
        if raw_value is not None:
            return OptionsUtils.convert_value(raw_value, option.value_type())
        return default if default is not None else option.default_value()

    def set(self, option: ConfigOption, value: Any):
        self.data[option.key()] = OptionsUtils.convert_to_string(value)

    def contains(self, option: ConfigOption) -> bool:
        return self.data.get(option.key()) is not None

    def copy(self) -> 'Options':
        return Options(dict(self.data))
