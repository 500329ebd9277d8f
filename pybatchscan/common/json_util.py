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

import json
from dataclasses import field, fields, is_dataclass
from typing import Any, Dict, List, Type, TypeVar, Union

T = TypeVar("T")


def json_field(json_name: str, **kwargs):
    """Create a field with custom JSON name"""
    return field(metadata={"json_name": json_name}, **kwargs)


class JSON:

    @staticmethod
    def to_json(obj: Any, **kwargs) -> str:
        return json.dumps(JSON.to_dict(obj), ensure_ascii=False, **kwargs)

    @staticmethod
    def from_json(json_str: str, target_class: Type[T]) -> T:
        return JSON.from_dict(json.loads(json_str), target_class)

    @staticmethod
    def to_dict(obj: Any) -> Any:
        """Convert to dictionary with custom field names"""
        if hasattr(obj, "to_dict") and callable(getattr(obj, "to_dict")):
            return obj.to_dict()
        if isinstance(obj, (list, tuple)):
            return [JSON.to_dict(item) for item in obj]
        if not is_dataclass(obj):
            return obj

        result = {}
        for field_info in fields(obj):
            json_name = field_info.metadata.get("json_name", field_info.name)
            result[json_name] = JSON.to_dict(getattr(obj, field_info.name))
        return result

    @staticmethod
    def from_dict(data: Dict[str, Any], target_class: Type[T]) -> T:
        """Create instance from dictionary, nested dataclasses are resolved from field types"""
        if hasattr(target_class, "from_dict") and callable(getattr(target_class, "from_dict")):
            return target_class.from_dict(data)

        kwargs = {}
        for field_info in fields(target_class):
            json_name = field_info.metadata.get("json_name", field_info.name)
            if json_name not in data:
                continue
            value = data[json_name]
            field_type = field_info.type
            origin_type = getattr(field_type, '__origin__', None)
            args = getattr(field_type, '__args__', None) or ()
            if origin_type is Union and len(args) == 2 and value is not None:
                field_type = args[0]
                origin_type = getattr(field_type, '__origin__', None)
                args = getattr(field_type, '__args__', None) or ()
            if origin_type in (list, List) and args and is_dataclass(args[0]):
                kwargs[field_info.name] = [JSON.from_dict(item, args[0]) for item in value]
            elif is_dataclass(field_type) and value is not None:
                kwargs[field_info.name] = JSON.from_dict(value, field_type)
            else:
                kwargs[field_info.name] = value
        return target_class(**kwargs)
