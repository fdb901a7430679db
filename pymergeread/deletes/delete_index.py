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

from typing import Dict, Optional, Tuple

from pymergeread.deletes.bitmap_deletion_vector import BitmapDeletionVector
from pymergeread.manifest.schema.file_content import FileContent
from pymergeread.table.row.struct_like import StructLikeSet


class DeleteIndex:
    """
    The parsed content of one delete file, tagged by its FileContent.

    A POSITION_DELETES index maps every data file path referenced by the delete file to a
    deletion vector of 0-based row positions. An EQUALITY_DELETES index holds the set of
    deleted keys projected on equality_field_ids. An index is never modified once built,
    so it may be shared by any number of scan tasks.
    """

    def __init__(self, content: FileContent, file_path: str,
                 position_vectors: Optional[Dict[str, BitmapDeletionVector]] = None,
                 equality_field_ids: Tuple[int, ...] = (),
                 equality_keys: Optional[StructLikeSet] = None):
        self.content = content
        self.file_path = file_path
        self.position_vectors = position_vectors if position_vectors is not None else {}
        self.equality_field_ids = tuple(equality_field_ids)
        self.equality_keys = equality_keys if equality_keys is not None else StructLikeSet()

    @staticmethod
    def for_positions(file_path: str, position_vectors: Dict[str, BitmapDeletionVector]) -> 'DeleteIndex':
        return DeleteIndex(FileContent.POSITION_DELETES, file_path, position_vectors=position_vectors)

    @staticmethod
    def for_equalities(file_path: str, equality_field_ids: Tuple[int, ...], keys: StructLikeSet) -> 'DeleteIndex':
        return DeleteIndex(FileContent.EQUALITY_DELETES, file_path, equality_field_ids=equality_field_ids,
                           equality_keys=keys)

    def is_position_index(self) -> bool:
        return self.content == FileContent.POSITION_DELETES

    def position_vector(self, data_file_path: str) -> Optional[BitmapDeletionVector]:
        return self.position_vectors.get(data_file_path)

    def cardinality(self) -> int:
        if self.is_position_index():
            return sum(v.get_cardinality() for v in self.position_vectors.values())
        return len(self.equality_keys)

    def __repr__(self):
        if self.is_position_index():
            return f"DeleteIndex(POSITION_DELETES, file={self.file_path}, paths={len(self.position_vectors)})"
        return (f"DeleteIndex(EQUALITY_DELETES, file={self.file_path}, "
                f"field_ids={list(self.equality_field_ids)}, keys={len(self.equality_keys)})")
