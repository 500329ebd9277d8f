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

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pyarrow
from pyarrow import types

_DECIMAL = re.compile(r'DECIMAL\((\d+)(?:,\s*(\d+))?\)')
MAX_DECIMAL_PRECISION = 38
_BINARY = re.compile(r'BINARY\((\d+)\)')
_TIMESTAMP = re.compile(r'TIMESTAMP\((\d+)\)')

# atomic type keywords whose arrow type takes no parameters
_SIMPLE_ARROW_TYPES = {
    'TINYINT': pyarrow.int8(),
    'SMALLINT': pyarrow.int16(),
    'INT': pyarrow.int32(),
    'BIGINT': pyarrow.int64(),
    'FLOAT': pyarrow.float32(),
    'DOUBLE': pyarrow.float64(),
    'BOOLEAN': pyarrow.bool_(),
    'STRING': pyarrow.string(),
    'VARCHAR': pyarrow.string(),
    'BYTES': pyarrow.binary(),
    'DATE': pyarrow.date32(),
}
_PARAMETERIZED_KEYWORDS = {'BINARY', 'DECIMAL', 'TIMESTAMP'}


class DataType(ABC):
    def __init__(self, nullable: bool = True):
        self.nullable = nullable

    @abstractmethod
    def to_dict(self) -> Any:
        pass

    def _null_suffix(self) -> str:
        return "" if self.nullable else " NOT NULL"


@dataclass
class AtomicType(DataType):
    type: str

    def __init__(self, type: str, nullable: bool = True):
        super().__init__(nullable)
        self.type = type

    def to_dict(self) -> str:
        return self.type + self._null_suffix()

    def root(self) -> str:
        """The type keyword without its parameters, e.g. DECIMAL for DECIMAL(10, 2)."""
        return self.type.upper().split("(")[0].strip()

    def decimal_precision(self) -> int:
        match = _DECIMAL.fullmatch(self.type.upper())
        return int(match.group(1)) if match else MAX_DECIMAL_PRECISION

    def decimal_scale(self) -> int:
        match = _DECIMAL.fullmatch(self.type.upper())
        return int(match.group(2) or 0) if match else 0

    def __str__(self) -> str:
        return self.type + self._null_suffix()


@dataclass
class ArrayType(DataType):
    element: DataType

    def __init__(self, nullable: bool, element_type: DataType):
        super().__init__(nullable)
        self.element = element_type

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "ARRAY" + self._null_suffix(), "element": self.element.to_dict()}

    def __str__(self) -> str:
        return "ARRAY<{}>{}".format(self.element, self._null_suffix())


@dataclass
class MapType(DataType):
    key: DataType
    value: DataType

    def __init__(self, nullable: bool, key_type: DataType, value_type: DataType):
        super().__init__(nullable)
        self.key = key_type
        self.value = value_type

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "MAP" + self._null_suffix(), "key": self.key.to_dict(), "value": self.value.to_dict()}

    def __str__(self) -> str:
        return "MAP<{}, {}>{}".format(self.key, self.value, self._null_suffix())


@dataclass
class DataField:
    """A column of a schema. The id identifies the column across renames, stats are keyed by it."""

    FIELD_ID = "id"
    FIELD_NAME = "name"
    FIELD_TYPE = "type"
    FIELD_DESCRIPTION = "description"

    id: int
    name: str
    type: DataType
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DataField":
        return DataTypeParser.parse_data_field(data)

    def to_dict(self) -> Dict[str, Any]:
        result = {self.FIELD_ID: self.id, self.FIELD_NAME: self.name, self.FIELD_TYPE: self.type.to_dict()}
        if self.description is not None:
            result[self.FIELD_DESCRIPTION] = self.description
        return result

    def __str__(self) -> str:
        return "{}: {} {}".format(self.id, self.name, self.type)


class DataTypeParser:
    """Reads the JSON form of types and fields written by to_dict."""

    @staticmethod
    def parse_atomic_type_sql_string(type_string: str) -> AtomicType:
        upper = type_string.upper()
        nullable = "NOT NULL" not in upper
        type_name = upper.replace("NOT NULL", "").strip()
        keyword = type_name.split("(")[0].strip()
        if keyword not in _SIMPLE_ARROW_TYPES and keyword not in _PARAMETERIZED_KEYWORDS:
            raise ValueError("Unknown type: {}".format(keyword))
        return AtomicType(type_name, nullable)

    @staticmethod
    def parse_data_type(json_data: Union[Dict[str, Any], str]) -> DataType:
        if isinstance(json_data, str):
            return DataTypeParser.parse_atomic_type_sql_string(json_data)
        if not isinstance(json_data, dict) or "type" not in json_data:
            raise ValueError("Cannot parse data type: {}".format(json_data))

        type_string = json_data["type"]
        nullable = "NOT NULL" not in type_string
        if type_string.startswith("ARRAY"):
            return ArrayType(nullable, DataTypeParser.parse_data_type(json_data.get("element")))
        if type_string.startswith("MAP"):
            return MapType(nullable,
                           DataTypeParser.parse_data_type(json_data.get("key")),
                           DataTypeParser.parse_data_type(json_data.get("value")))
        return DataTypeParser.parse_atomic_type_sql_string(type_string)

    @staticmethod
    def parse_data_field(json_data: Dict[str, Any]) -> DataField:
        missing = [key for key in (DataField.FIELD_ID, DataField.FIELD_NAME, DataField.FIELD_TYPE)
                   if key not in json_data]
        if missing:
            raise ValueError("Missing {} in field JSON: {}".format(missing, json_data))
        return DataField(
            id=int(json_data[DataField.FIELD_ID]),
            name=json_data[DataField.FIELD_NAME],
            type=DataTypeParser.parse_data_type(json_data[DataField.FIELD_TYPE]),
            description=json_data.get(DataField.FIELD_DESCRIPTION),
        )


# pyarrow type checks and the atomic type each maps to, in the order they are tried
_FROM_ARROW: List[Tuple[Callable[[pyarrow.DataType], bool], Callable[[pyarrow.DataType], str]]] = [
    (types.is_int8, lambda t: 'TINYINT'),
    (types.is_int16, lambda t: 'SMALLINT'),
    (types.is_int32, lambda t: 'INT'),
    (types.is_int64, lambda t: 'BIGINT'),
    (types.is_float32, lambda t: 'FLOAT'),
    (types.is_float64, lambda t: 'DOUBLE'),
    (types.is_boolean, lambda t: 'BOOLEAN'),
    (lambda t: types.is_string(t) or types.is_large_string(t), lambda t: 'STRING'),
    (types.is_fixed_size_binary, lambda t: f'BINARY({t.byte_width})'),
    (lambda t: types.is_binary(t) or types.is_large_binary(t), lambda t: 'BYTES'),
    (types.is_decimal, lambda t: f'DECIMAL({t.precision}, {t.scale})'),
    (lambda t: types.is_timestamp(t) and t.tz is None,
     lambda t: 'TIMESTAMP({})'.format({'s': 0, 'ms': 3, 'us': 6, 'ns': 9}[t.unit])),
    (types.is_date32, lambda t: 'DATE'),
]


class PyarrowFieldParser:
    """Converts between schema types and pyarrow (and Avro, for data files written from arrow)."""

    @staticmethod
    def from_data_type(data_type: DataType) -> pyarrow.DataType:
        if isinstance(data_type, ArrayType):
            return pyarrow.list_(PyarrowFieldParser.from_data_type(data_type.element))
        if isinstance(data_type, MapType):
            return pyarrow.map_(PyarrowFieldParser.from_data_type(data_type.key),
                                PyarrowFieldParser.from_data_type(data_type.value))
        if not isinstance(data_type, AtomicType):
            raise ValueError("Unsupported data type: {}".format(data_type))

        type_name = data_type.type.upper()
        root = data_type.root()
        if root in _SIMPLE_ARROW_TYPES:
            return _SIMPLE_ARROW_TYPES[root]
        if root == 'BINARY':
            match = _BINARY.fullmatch(type_name)
            return pyarrow.binary(int(match.group(1))) if match else pyarrow.binary()
        if root == 'DECIMAL':
            match = _DECIMAL.fullmatch(type_name)
            if match:
                return pyarrow.decimal128(int(match.group(1)), int(match.group(2) or 0))
            return pyarrow.decimal128(10, 0)
        if root == 'TIMESTAMP':
            match = _TIMESTAMP.fullmatch(type_name)
            precision = int(match.group(1)) if match else 6
            for unit, max_precision in (('s', 0), ('ms', 3), ('us', 6)):
                if precision <= max_precision:
                    return pyarrow.timestamp(unit)
            return pyarrow.timestamp('ns')
        raise ValueError("Unsupported data type: {}".format(data_type))

    @staticmethod
    def from_data_field(data_field: DataField) -> pyarrow.Field:
        return pyarrow.field(data_field.name, PyarrowFieldParser.from_data_type(data_field.type),
                             nullable=data_field.type.nullable)

    @staticmethod
    def from_data_fields(data_fields: List[DataField]) -> pyarrow.Schema:
        return pyarrow.schema([PyarrowFieldParser.from_data_field(f) for f in data_fields])

    @staticmethod
    def to_data_type(pa_type: pyarrow.DataType, nullable: bool) -> DataType:
        if types.is_list(pa_type) or types.is_large_list(pa_type):
            return ArrayType(nullable, PyarrowFieldParser.to_data_type(pa_type.value_type, True))
        if types.is_map(pa_type):
            return MapType(nullable,
                           PyarrowFieldParser.to_data_type(pa_type.key_type, False),
                           PyarrowFieldParser.to_data_type(pa_type.item_type, True))
        for matches, type_name in _FROM_ARROW:
            if matches(pa_type):
                return AtomicType(type_name(pa_type), nullable)
        raise ValueError("Unsupported pyarrow type: {}".format(pa_type))

    @staticmethod
    def to_data_fields(pa_schema: pyarrow.Schema, first_id: int = 1) -> List[DataField]:
        return [
            DataField(first_id + i, pa_field.name, PyarrowFieldParser.to_data_type(pa_field.type, pa_field.nullable))
            for i, pa_field in enumerate(pa_schema)
        ]

    @staticmethod
    def to_avro_type(field_type: pyarrow.DataType) -> Union[str, Dict[str, Any]]:
        if types.is_integer(field_type):
            return "int" if types.is_signed_integer(field_type) and field_type.bit_width <= 32 else "long"
        if types.is_float32(field_type):
            return "float"
        if types.is_float64(field_type):
            return "double"
        if types.is_boolean(field_type):
            return "boolean"
        if types.is_string(field_type) or types.is_large_string(field_type):
            return "string"
        if types.is_binary(field_type) or types.is_large_binary(field_type):
            return "bytes"
        if types.is_decimal(field_type):
            return {"type": "bytes", "logicalType": "decimal",
                    "precision": field_type.precision, "scale": field_type.scale}
        if types.is_date(field_type):
            return {"type": "int", "logicalType": "date"}
        if types.is_timestamp(field_type):
            logical_type = "timestamp-millis" if field_type.unit == 'ms' else "timestamp-micros"
            return {"type": "long", "logicalType": logical_type}
        if types.is_list(field_type) or types.is_large_list(field_type):
            return {"type": "array", "items": PyarrowFieldParser.to_avro_type(field_type.value_type)}
        raise ValueError("Unsupported pyarrow type for Avro conversion: {}".format(field_type))

    @staticmethod
    def to_avro_schema(pyarrow_schema: pyarrow.Schema, name: str = "Root",
                       namespace: str = "pybatchscan.avro") -> Dict[str, Any]:
        fields = []
        for field in pyarrow_schema:
            avro_type = PyarrowFieldParser.to_avro_type(field.type)
            fields.append({"name": field.name, "type": ["null", avro_type] if field.nullable else avro_type})
        return {"type": "record", "name": name, "namespace": namespace, "fields": fields}
