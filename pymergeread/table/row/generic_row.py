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

from typing import Any, List, Optional

from pymergeread.schema.data_types import DataField
from pymergeread.table.row.internal_row import InternalRow
from pymergeread.table.row.struct_like import struct_key


class GenericRow(InternalRow):
    """A row backed by a list of values, optionally described by its fields."""

    def __init__(self, values: List[Any], fields: Optional[List[DataField]] = None):
        self.values = values
        self.fields = fields or []

    @classmethod
    def of(cls, *values: Any) -> 'GenericRow':
        return cls(list(values))

    def get_field(self, pos: int) -> Any:
        if pos >= len(self.values):
            raise IndexError(f"Position {pos} is out of bounds for row arity {len(self.values)}")
        return self.values[pos]

    def __len__(self) -> int:
        return len(self.values)

    def __eq__(self, other):
        if not isinstance(other, InternalRow):
            return False
        return struct_key(self) == struct_key(other)

    def __hash__(self):
        return hash(struct_key(self))

    def __str__(self):
        if not self.fields:
            return f"GenericRow({', '.join(repr(v) for v in self.values)})"
        field_strs = [f"{field.name}={repr(value)}" for field, value in zip(self.fields, self.values)]
        return f"GenericRow({', '.join(field_strs)})"

    __repr__ = __str__
