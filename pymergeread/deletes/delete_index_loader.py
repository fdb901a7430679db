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
from typing import Dict, List

import polars
import pyarrow

from pymergeread.common.exceptions import DataCorruption, SchemaMismatch
from pymergeread.deletes.bitmap_deletion_vector import BitmapDeletionVector
from pymergeread.deletes.delete_index import DeleteIndex
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.manifest.schema.file_content import FileContent
from pymergeread.read.reader.data_file_batch_reader import DataFileBatchReader
from pymergeread.read.row_source import RowSource
from pymergeread.schema.data_types import AtomicType, DataField
from pymergeread.schema.table_schema import TableSchema
from pymergeread.table.row.struct_like import StructLikeSet

logger = logging.getLogger(__name__)

DELETE_FILE_PATH = DataField(2147483546, "file_path", AtomicType("STRING", nullable=False))
DELETE_FILE_POS = DataField(2147483545, "pos", AtomicType("BIGINT", nullable=False))
POSITION_DELETE_FIELDS = [DELETE_FILE_PATH, DELETE_FILE_POS]


class DeleteIndexLoader:
    """Parses delete files into DeleteIndexes, reading them through a RowSource."""

    def __init__(self, row_source: RowSource):
        self.row_source = row_source

    def load(self, delete_file: DeleteFileMeta, table_schema: TableSchema) -> DeleteIndex:
        if delete_file.content == FileContent.POSITION_DELETES:
            index = self._load_positions(delete_file)
        else:
            index = self._load_equalities(delete_file, table_schema)
        logger.debug("Loaded %s with %d deletes", index, index.cardinality())
        return index

    def _load_positions(self, delete_file: DeleteFileMeta) -> DeleteIndex:
        vectors: Dict[str, BitmapDeletionVector] = {}
        with self._open(delete_file, POSITION_DELETE_FIELDS) as reader:
            while True:
                batch = self._read(reader, delete_file)
                if batch is None:
                    break
                paths = batch.column(0).to_pylist()
                positions = batch.column(1).to_pylist()
                for path, pos in zip(paths, positions):
                    if path is None or pos is None:
                        raise DataCorruption("Position delete row with null file_path or pos",
                                             delete_file.file_path)
                    if pos < 0:
                        raise DataCorruption(f"Negative position delete {pos} for {path}", delete_file.file_path)
                    if pos > BitmapDeletionVector.MAX_VALUE:
                        raise DataCorruption(f"Position delete {pos} for {path} exceeds the supported row count "
                                             f"{BitmapDeletionVector.MAX_VALUE}", delete_file.file_path)
                    vector = vectors.get(path)
                    if vector is None:
                        vector = vectors[path] = BitmapDeletionVector()
                    vector.delete(pos)
        return DeleteIndex.for_positions(delete_file.file_path, vectors)

    def _load_equalities(self, delete_file: DeleteFileMeta, table_schema: TableSchema) -> DeleteIndex:
        fields = []
        for field_id in delete_file.equality_field_ids:
            field = table_schema.find_field(field_id)
            if field is None:
                raise SchemaMismatch(field_id, delete_file.file_path,
                                     f"Equality field id {field_id} is not present in table schema "
                                     f"{table_schema.id}")
            fields.append(field)

        keys = StructLikeSet()
        with self._open(delete_file, fields) as reader:
            while True:
                batch = self._read(reader, delete_file)
                if batch is None:
                    break
                if batch.num_rows == 0:
                    continue
                keys.add_all(polars.from_arrow(batch).iter_rows())
        return DeleteIndex.for_equalities(delete_file.file_path, delete_file.equality_field_ids, keys)

    def _open(self, delete_file: DeleteFileMeta, fields: List[DataField]) -> DataFileBatchReader:
        names = [field.name for field in fields]
        format_reader = self.row_source.open(delete_file.file_path, delete_file.file_format, names)
        return DataFileBatchReader(format_reader, names, fields)

    @staticmethod
    def _read(reader: DataFileBatchReader, delete_file: DeleteFileMeta):
        try:
            return reader.read_arrow_batch()
        except pyarrow.ArrowException as e:
            raise DataCorruption(f"Undecodable delete row: {e}", delete_file.file_path) from e
