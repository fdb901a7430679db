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

from typing import Dict, List, Optional, Sequence

import pyarrow

from pymergeread.schema.data_types import DataField, DataType, PyarrowFieldParser

ALL_COLUMNS = "*"


class TableSchema:
    """
    An immutable, versioned table schema. Field ids are the stable identity of a column,
    names may change across schema versions.
    """

    def __init__(self, id: int, fields: List[DataField], partition_keys: Optional[List[str]] = None,
                 highest_field_id: Optional[int] = None, options: Optional[Dict[str, str]] = None):
        ids = [field.id for field in fields]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate field ids in schema: {ids}")
        self.id = id
        self.fields = list(fields)
        self.partition_keys = partition_keys or []
        self.highest_field_id = highest_field_id if highest_field_id is not None else max(ids, default=0)
        self.options = options or {}
        self._fields_by_id = {field.id: field for field in self.fields}
        self._fields_by_name = {field.name: field for field in self.fields}

    @staticmethod
    def from_pyarrow_schema(pa_schema: pyarrow.Schema, partition_keys: Optional[List[str]] = None,
                            options: Optional[Dict[str, str]] = None) -> 'TableSchema':
        fields = PyarrowFieldParser.to_data_fields(pa_schema)
        # pyarrow fields without field id metadata are numbered from 1
        if all(not (f.metadata and b'field_id' in f.metadata) for f in pa_schema):
            for field in fields:
                field.id += 1
        return TableSchema(0, fields, partition_keys, options=options)

    @property
    def field_names(self) -> List[str]:
        return [field.name for field in self.fields]

    @property
    def field_ids(self) -> List[int]:
        return [field.id for field in self.fields]

    def find_field(self, field_id: int) -> Optional[DataField]:
        return self._fields_by_id.get(field_id)

    def find_field_by_name(self, name: str) -> Optional[DataField]:
        return self._fields_by_name.get(name)

    def project(self, names: Optional[Sequence[str]]) -> List[DataField]:
        """
        Selects the fields with the given names, in the requested order. None, an empty
        list or '*' select every field.
        """
        if not names or ALL_COLUMNS in names:
            return list(self.fields)
        projected = []
        for name in names:
            field = self._fields_by_name.get(name)
            if field is None:
                raise ValueError(f"Column '{name}' does not exist in schema {self.field_names}")
            projected.append(field)
        return projected

    def make_column_optional(self, name: str) -> 'TableSchema':
        field = self._fields_by_name.get(name)
        if field is None:
            raise ValueError(f"Column '{name}' does not exist")
        fields = [f.as_optional() if f.id == field.id else f for f in self.fields]
        return TableSchema(self.id + 1, fields, self.partition_keys, self.highest_field_id, self.options)

    def add_column(self, name: str, data_type: DataType) -> 'TableSchema':
        if name in self._fields_by_name:
            raise ValueError(f"Column '{name}' already exists")
        if not data_type.nullable:
            raise ValueError(f"Added column '{name}' must be nullable")
        new_id = self.highest_field_id + 1
        fields = self.fields + [DataField(new_id, name, data_type)]
        return TableSchema(self.id + 1, fields, self.partition_keys, new_id, self.options)

    def to_arrow_schema(self, fields: Optional[List[DataField]] = None) -> pyarrow.Schema:
        return PyarrowFieldParser.from_data_fields(fields if fields is not None else self.fields)

    def __eq__(self, other):
        if not isinstance(other, TableSchema):
            return False
        return self.id == other.id and self.fields == other.fields and self.partition_keys == other.partition_keys

    def __hash__(self):
        return hash((self.id, tuple(self.field_ids)))

    def __str__(self):
        return f"TableSchema(id={self.id}, fields=[{', '.join(str(f) for f in self.fields)}])"
