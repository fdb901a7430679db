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

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import polars
import pyarrow
from pyarrow import RecordBatch
from pyroaring import BitMap

from pymergeread.common.exceptions import InvalidDeleteFile
from pymergeread.deletes.bitmap_deletion_vector import BitmapDeletionVector
from pymergeread.deletes.delete_index import DeleteIndex
from pymergeread.manifest.schema.data_file_meta import DataFileMeta
from pymergeread.schema.data_types import DataField
from pymergeread.schema.schema_resolver import SchemaResolver
from pymergeread.table.row.internal_row import InternalRow
from pymergeread.table.row.struct_like import StructLikeSet, values_key

logger = logging.getLogger(__name__)


class EqualityDeleteGroup:
    """The union of the equality delete keys of every delete file sharing one field id set."""

    def __init__(self, field_ids: Tuple[int, ...], keys: StructLikeSet, positions: List[int]):
        self.field_ids = field_ids
        self.keys = keys
        # positions of field_ids within the read fields of the data file
        self.positions = positions

    def is_deleted(self, row: InternalRow) -> bool:
        return self.keys.contains_key(values_key([row.get_field(pos) for pos in self.positions]))


class DeleteFilter:
    """
    Decides which rows of one data file are deleted. A row at 0-based position p is deleted
    when p is in the position vector of the file, or when its projection on the field ids of
    any equality group is one of the group's keys.
    """

    def __init__(self, data_file: DataFileMeta, read_fields: List[DataField],
                 position_vector: Optional[BitmapDeletionVector],
                 equality_groups: List[EqualityDeleteGroup]):
        self.data_file = data_file
        self.read_fields = read_fields
        self.position_vector = position_vector
        self.equality_groups = equality_groups
        self._equality_columns = sorted({pos for group in equality_groups for pos in group.positions})
        column_offsets = {pos: i for i, pos in enumerate(self._equality_columns)}
        self._group_offsets = [[column_offsets[pos] for pos in group.positions] for group in equality_groups]

    @staticmethod
    def create(data_file: DataFileMeta, delete_indexes: Sequence[DeleteIndex], read_fields: List[DataField],
               check_bounds: bool = True) -> 'DeleteFilter':
        """
        Merges the position deletes of this data file and groups the equality deletes by
        field id set.

        Raises:
            SchemaMismatch: an equality field id is not one of the read fields.
            InvalidDeleteFile: a position delete is beyond the row count of the data file.
        """
        position_vector: Optional[BitmapDeletionVector] = None
        equality_keys: Dict[Tuple[int, ...], StructLikeSet] = {}
        for index in delete_indexes:
            if index.is_position_index():
                vector = index.position_vector(data_file.file_path)
                if vector is None or vector.is_empty():
                    continue
                if position_vector is None:
                    position_vector = vector.copy()
                else:
                    position_vector.merge(vector)
            else:
                keys = equality_keys.get(index.equality_field_ids)
                if keys is None:
                    keys = equality_keys[index.equality_field_ids] = StructLikeSet()
                keys.update(index.equality_keys)

        if check_bounds and position_vector is not None and position_vector.max() >= data_file.row_count:
            raise InvalidDeleteFile(position_vector.max(), data_file.row_count, data_file.file_path)

        groups = []
        for field_ids, keys in equality_keys.items():
            positions = SchemaResolver.positions_of(field_ids, read_fields, data_file.file_path)
            groups.append(EqualityDeleteGroup(field_ids, keys, positions))

        logger.debug("Delete filter for %s: %d position deletes, %d equality groups",
                     data_file.file_path, position_vector.get_cardinality() if position_vector else 0, len(groups))
        return DeleteFilter(data_file, read_fields, position_vector, groups)

    @property
    def required_field_ids(self) -> List[int]:
        field_ids = []
        for group in self.equality_groups:
            for field_id in group.field_ids:
                if field_id not in field_ids:
                    field_ids.append(field_id)
        return field_ids

    def has_deletes(self) -> bool:
        return self.position_vector is not None or bool(self.equality_groups)

    def is_deleted(self, pos: int, row: InternalRow) -> bool:
        if self.position_vector is not None and self.position_vector.is_deleted(pos):
            return True
        return any(group.is_deleted(row) for group in self.equality_groups)

    def test(self, pos: int, row: InternalRow) -> bool:
        """Returns True when the row at the given position survives the deletes."""
        return not self.is_deleted(pos, row)

    def apply(self, batch: RecordBatch, start_pos: int) -> RecordBatch:
        """
        Removes the deleted rows of a batch whose first row is at start_pos, keeping the
        surviving rows in their original order.
        """
        num_rows = batch.num_rows
        if num_rows == 0 or not self.has_deletes():
            return batch

        if self.position_vector is not None:
            range_bitmap = BitMap(range(start_pos, start_pos + num_rows))
            kept = [pos - start_pos for pos in range_bitmap - self.position_vector.bit_map()]
        else:
            kept = list(range(num_rows))

        if self.equality_groups and kept:
            key_rows = list(polars.from_arrow(batch.select(self._equality_columns)).iter_rows())
            kept = [i for i in kept if not self._equality_deleted(key_rows[i])]

        if len(kept) == num_rows:
            return batch
        return batch.take(pyarrow.array(kept, type=pyarrow.int32()))

    def _equality_deleted(self, key_row: tuple) -> bool:
        for group, offsets in zip(self.equality_groups, self._group_offsets):
            if group.keys.contains_key(values_key([key_row[offset] for offset in offsets])):
                return True
        return False

    def filter(self, reader):
        from pymergeread.deletes.apply_delete_filter_reader import ApplyDeleteFilterReader

        return ApplyDeleteFilterReader(reader, self)

    def __repr__(self):
        return (f"DeleteFilter(file={self.data_file.file_path}, "
                f"position_deletes={self.position_vector.get_cardinality() if self.position_vector else 0}, "
                f"equality_field_ids={[list(g.field_ids) for g in self.equality_groups]})")
