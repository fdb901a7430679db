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
from typing import Any, Dict, List, Optional, Union

import pyarrow
from pyarrow import types


class DataType(ABC):
    def __init__(self, nullable: bool = True):
        self.nullable = nullable

    @abstractmethod
    def copy(self, nullable: bool) -> 'DataType':
        """Returns a copy of this type with the given nullability."""

    @abstractmethod
    def __str__(self) -> str:
        pass


@dataclass
class AtomicType(DataType):
    type: str

    def __init__(self, type: str, nullable: bool = True):
        super().__init__(nullable)
        self.type = type

    def copy(self, nullable: bool) -> 'AtomicType':
        return AtomicType(self.type, nullable)

    def __str__(self) -> str:
        null_suffix = "" if self.nullable else " NOT NULL"
        return "{}{}".format(self.type, null_suffix)


@dataclass
class ArrayType(DataType):
    element: DataType

    def __init__(self, nullable: bool, element_type: DataType):
        super().__init__(nullable)
        self.element = element_type

    def copy(self, nullable: bool) -> 'ArrayType':
        return ArrayType(nullable, self.element)

    def __str__(self) -> str:
        null_suffix = "" if self.nullable else " NOT NULL"
        return "ARRAY<{}>{}".format(self.element, null_suffix)


@dataclass
class MapType(DataType):
    key: DataType
    value: DataType

    def __init__(self, nullable: bool, key_type: DataType, value_type: DataType):
        super().__init__(nullable)
        self.key = key_type
        self.value = value_type

    def copy(self, nullable: bool) -> 'MapType':
        return MapType(nullable, self.key, self.value)

    def __str__(self) -> str:
        null_suffix = "" if self.nullable else " NOT NULL"
        return "MAP<{}, {}>{}".format(self.key, self.value, null_suffix)


@dataclass
class DataField:
    id: int
    name: str
    type: DataType
    description: Optional[str] = None

    def __init__(self, id: int, name: str, type: DataType, description: Optional[str] = None):
        self.id = id
        self.name = name
        self.type = type
        self.description = description

    @property
    def nullable(self) -> bool:
        return self.type.nullable

    def as_optional(self) -> 'DataField':
        return DataField(self.id, self.name, self.type.copy(True), self.description)

    def __str__(self) -> str:
        return "{}: {} (id={})".format(self.name, self.type, self.id)


def required(field_id: int, name: str, type_name: str) -> DataField:
    return DataField(field_id, name, AtomicType(type_name, nullable=False))


def optional(field_id: int, name: str, type_name: str) -> DataField:
    return DataField(field_id, name, AtomicType(type_name, nullable=True))


class PyarrowFieldParser:

    @staticmethod
    def from_data_type(data_type: DataType) -> pyarrow.DataType:
        if isinstance(data_type, AtomicType):
            type_name = data_type.type.upper()
            if type_name == 'TINYINT':
                return pyarrow.int8()
            elif type_name == 'SMALLINT':
                return pyarrow.int16()
            elif type_name in ('INT', 'INTEGER'):
                return pyarrow.int32()
            elif type_name == 'BIGINT':
                return pyarrow.int64()
            elif type_name == 'FLOAT':
                return pyarrow.float32()
            elif type_name == 'DOUBLE':
                return pyarrow.float64()
            elif type_name == 'BOOLEAN':
                return pyarrow.bool_()
            elif type_name == 'STRING' or type_name.startswith('CHAR') or type_name.startswith('VARCHAR'):
                return pyarrow.string()
            elif type_name == 'BYTES' or type_name.startswith('VARBINARY'):
                return pyarrow.binary()
            elif type_name.startswith('DECIMAL'):
                match_ps = re.fullmatch(r'DECIMAL\((\d+),\s*(\d+)\)', type_name)
                if match_ps:
                    precision, scale = map(int, match_ps.groups())
                    return pyarrow.decimal128(precision, scale)
                return pyarrow.decimal128(10, 0)
            elif type_name == 'DATE':
                return pyarrow.date32()
            elif type_name.startswith('TIMESTAMP'):
                match = re.fullmatch(r'TIMESTAMP\((\d+)\)', type_name)
                precision = int(match.group(1)) if match else 6
                if precision == 0:
                    return pyarrow.timestamp('s')
                elif precision <= 3:
                    return pyarrow.timestamp('ms')
                elif precision <= 6:
                    return pyarrow.timestamp('us')
                return pyarrow.timestamp('ns')
        elif isinstance(data_type, ArrayType):
            return pyarrow.list_(PyarrowFieldParser.from_data_type(data_type.element))
        elif isinstance(data_type, MapType):
            key_type = PyarrowFieldParser.from_data_type(data_type.key)
            value_type = PyarrowFieldParser.from_data_type(data_type.value)
            return pyarrow.map_(key_type, value_type)
        raise ValueError("Unsupported data type: {}".format(data_type))

    @staticmethod
    def from_data_field(data_field: DataField) -> pyarrow.Field:
        pa_field_type = PyarrowFieldParser.from_data_type(data_field.type)
        metadata = {b'field_id': str(data_field.id).encode('utf-8')}
        return pyarrow.field(data_field.name, pa_field_type, nullable=data_field.type.nullable, metadata=metadata)

    @staticmethod
    def from_data_fields(data_fields: List[DataField]) -> pyarrow.Schema:
        return pyarrow.schema([PyarrowFieldParser.from_data_field(field) for field in data_fields])

    @staticmethod
    def to_data_type(pa_type: pyarrow.DataType, nullable: bool) -> DataType:
        type_name = None
        if types.is_int8(pa_type):
            type_name = 'TINYINT'
        elif types.is_int16(pa_type):
            type_name = 'SMALLINT'
        elif types.is_int32(pa_type):
            type_name = 'INT'
        elif types.is_int64(pa_type):
            type_name = 'BIGINT'
        elif types.is_float32(pa_type):
            type_name = 'FLOAT'
        elif types.is_float64(pa_type):
            type_name = 'DOUBLE'
        elif types.is_boolean(pa_type):
            type_name = 'BOOLEAN'
        elif types.is_string(pa_type) or types.is_large_string(pa_type):
            type_name = 'STRING'
        elif types.is_binary(pa_type) or types.is_large_binary(pa_type):
            type_name = 'BYTES'
        elif types.is_decimal(pa_type):
            type_name = f'DECIMAL({pa_type.precision}, {pa_type.scale})'
        elif types.is_date32(pa_type):
            type_name = 'DATE'
        elif types.is_timestamp(pa_type) and pa_type.tz is None:
            precision_mapping = {'s': 0, 'ms': 3, 'us': 6, 'ns': 9}
            type_name = f'TIMESTAMP({precision_mapping[pa_type.unit]})'
        elif types.is_list(pa_type) or types.is_large_list(pa_type):
            return ArrayType(nullable, PyarrowFieldParser.to_data_type(pa_type.value_type, True))
        elif types.is_map(pa_type):
            key_type = PyarrowFieldParser.to_data_type(pa_type.key_type, False)
            value_type = PyarrowFieldParser.to_data_type(pa_type.item_type, True)
            return MapType(nullable, key_type, value_type)
        if type_name is not None:
            return AtomicType(type_name, nullable)
        raise ValueError("Unsupported pyarrow type: {}".format(pa_type))

    @staticmethod
    def to_data_fields(pa_schema: pyarrow.Schema) -> List[DataField]:
        fields = []
        for i, pa_field in enumerate(pa_schema):
            field_id = i
            if pa_field.metadata and b'field_id' in pa_field.metadata:
                field_id = int(pa_field.metadata[b'field_id'])
            fields.append(DataField(field_id, pa_field.name,
                                    PyarrowFieldParser.to_data_type(pa_field.type, pa_field.nullable)))
        return fields

    @staticmethod
    def to_avro_type(field_type: pyarrow.DataType, field_name: str) -> Union[str, Dict[str, Any]]:
        if pyarrow.types.is_integer(field_type):
            if pyarrow.types.is_signed_integer(field_type) and field_type.bit_width <= 32:
                return "int"
            return "long"
        elif pyarrow.types.is_float32(field_type):
            return "float"
        elif pyarrow.types.is_float64(field_type):
            return "double"
        elif pyarrow.types.is_boolean(field_type):
            return "boolean"
        elif pyarrow.types.is_string(field_type) or pyarrow.types.is_large_string(field_type):
            return "string"
        elif pyarrow.types.is_binary(field_type) or pyarrow.types.is_large_binary(field_type):
            return "bytes"
        elif pyarrow.types.is_decimal(field_type):
            return {
                "type": "bytes",
                "logicalType": "decimal",
                "precision": field_type.precision,
                "scale": field_type.scale,
            }
        elif pyarrow.types.is_date(field_type):
            return {"type": "int", "logicalType": "date"}
        elif pyarrow.types.is_timestamp(field_type):
            if field_type.unit == 'ms':
                return {"type": "long", "logicalType": "timestamp-millis"}
            return {"type": "long", "logicalType": "timestamp-micros"}
        elif pyarrow.types.is_list(field_type) or pyarrow.types.is_large_list(field_type):
            value_field = field_type.value_field
            return {
                "type": "array",
                "items": PyarrowFieldParser.to_avro_type(value_field.type, value_field.name)
            }
        raise ValueError("Unsupported pyarrow type for Avro conversion: {}".format(field_type))

    @staticmethod
    def to_avro_schema(pyarrow_schema: pyarrow.Schema, name: str = "Root",
                       namespace: str = "pymergeread.avro") -> Dict[str, Any]:
        fields = []
        for field in pyarrow_schema:
            avro_type = PyarrowFieldParser.to_avro_type(field.type, field.name)
            if field.nullable:
                avro_type = ["null", avro_type]
            fields.append({"name": field.name, "type": avro_type})
        return {
            "type": "record",
            "name": name,
            "namespace": namespace,
            "fields": fields,
        }
