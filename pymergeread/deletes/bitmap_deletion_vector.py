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

from typing import Iterable

from pyroaring import BitMap

from pymergeread.deletes.deletion_vector import DeletionVector


class BitmapDeletionVector(DeletionVector):
    """
    A DeletionVector based on RoaringBitmap, it only supports files with row count
    not exceeding 2147483647 (max value for 32-bit integer). Positions are kept sorted
    and deduplicated whatever order they are added in.
    """

    MAX_VALUE = 2147483647

    def __init__(self, bitmap: BitMap = None):
        self._bitmap = bitmap if bitmap is not None else BitMap()

    @staticmethod
    def of(positions: Iterable[int]) -> 'BitmapDeletionVector':
        deletion_vector = BitmapDeletionVector()
        for position in positions:
            deletion_vector.delete(position)
        return deletion_vector

    def delete(self, position: int) -> None:
        self._check_position(position)
        self._bitmap.add(position)

    def is_deleted(self, position: int) -> bool:
        if position < 0 or position > self.MAX_VALUE:
            return False
        return position in self._bitmap

    def is_empty(self) -> bool:
        return len(self._bitmap) == 0

    def get_cardinality(self) -> int:
        return len(self._bitmap)

    def max(self) -> int:
        return self._bitmap.max()

    def merge(self, deletion_vector: DeletionVector) -> None:
        if isinstance(deletion_vector, BitmapDeletionVector):
            self._bitmap |= deletion_vector._bitmap
        else:
            raise RuntimeError("Only instance with the same class type can be merged.")

    def copy(self) -> 'BitmapDeletionVector':
        return BitmapDeletionVector(BitMap(self._bitmap))

    def bit_map(self):
        return self._bitmap

    def _check_position(self, position: int) -> None:
        if position < 0:
            raise ValueError(f"Row position must not be negative, got {position}.")
        if position > self.MAX_VALUE:
            raise ValueError(
                f"The file has too many rows, RoaringBitmap32 only supports files "
                f"with row count not exceeding {self.MAX_VALUE}."
            )

    def __eq__(self, other):
        if not isinstance(other, BitmapDeletionVector):
            return False
        return self._bitmap == other._bitmap

    def __hash__(self):
        return hash(tuple(self._bitmap))

    def __repr__(self):
        return f"BitmapDeletionVector({list(self._bitmap)})"
