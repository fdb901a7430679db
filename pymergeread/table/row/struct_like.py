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

import math
from typing import Any, Iterable, Iterator, Sequence, Tuple


class _NaN:
    """Single comparable stand-in for every float NaN."""

    def __eq__(self, other):
        return isinstance(other, _NaN)

    def __hash__(self):
        return hash("NaN")

    def __repr__(self):
        return "NaN"


NAN = _NaN()


def canonical_value(value: Any) -> Any:
    """
    Normalises a decoded field value so that values of the same logical content compare and
    hash equally regardless of the file format they were decoded from. None stays None and
    therefore equals None.
    """
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return NAN
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, dict):
        return tuple(sorted((k, canonical_value(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(canonical_value(v) for v in value)
    return value


def struct_key(row) -> Tuple:
    """Canonical key of a row: the ordered tuple of its normalised field values."""
    return tuple(canonical_value(row.get_field(pos)) for pos in range(len(row)))


def values_key(values: Sequence[Any]) -> Tuple:
    return tuple(canonical_value(value) for value in values)


class StructLikeSet:
    """
    A set of rows keyed by structural equality. Rows of any InternalRow implementation, or
    plain tuples of values, can be added and probed.
    """

    def __init__(self, keys: Iterable[Tuple] = ()):
        self._keys = set(keys)

    def add(self, row) -> bool:
        key = self._key_of(row)
        if key in self._keys:
            return False
        self._keys.add(key)
        return True

    def add_all(self, rows: Iterable) -> 'StructLikeSet':
        for row in rows:
            self.add(row)
        return self

    def update(self, other: 'StructLikeSet') -> None:
        self._keys |= other._keys

    def contains_key(self, key: Tuple) -> bool:
        return key in self._keys

    def __contains__(self, row) -> bool:
        return self._key_of(row) in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[Tuple]:
        return iter(self._keys)

    def __eq__(self, other):
        if not isinstance(other, StructLikeSet):
            return False
        return self._keys == other._keys

    def __hash__(self):
        return hash(frozenset(self._keys))

    def __repr__(self):
        return f"StructLikeSet({sorted(self._keys, key=repr)})"

    @staticmethod
    def _key_of(row) -> Tuple:
        if isinstance(row, tuple):
            return values_key(row)
        return struct_key(row)
