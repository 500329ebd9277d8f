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

from typing import Any, Type


class OptionsUtils:
    """Converts raw option values, usually strings from a property map, to the type of their option."""

    @staticmethod
    def convert_value(value: Any, target_type: Type) -> Any:
        if value is None:
            return None
        if target_type is str:
            return OptionsUtils.convert_to_string(value)
        if target_type is int:
            return OptionsUtils.convert_to_int(value)
        raise ValueError(f"Unsupported type: {target_type}")

    @staticmethod
    def convert_to_string(value: Any) -> str:
        if isinstance(value, bool):
            return 'true' if value else 'false'
        return str(value)

    @staticmethod
    def convert_to_int(value: Any) -> int:
        # bool is an int subclass, a flag is never a valid number
        if isinstance(value, bool):
            raise ValueError(f"Cannot convert {value!r} to int")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise ValueError(f"Cannot convert '{value}' to int") from None
        raise ValueError(f"Cannot convert {value!r} to int")
