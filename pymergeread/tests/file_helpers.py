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

import os
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

import fastavro
import pyarrow as pa
import pyarrow.orc as orc
import pyarrow.parquet as pq

from pymergeread.common.options.core_options import CoreOptions
from pymergeread.deletes.delete_index_loader import POSITION_DELETE_FIELDS
from pymergeread.manifest.schema.data_file_meta import DataFileMeta
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.schema.data_types import DataField, PyarrowFieldParser
from pymergeread.schema.table_schema import TableSchema
from pymergeread.table.row.generic_row import GenericRow

PARTITION = GenericRow.of(0)


class FileHelpers:
    """Writes data files and delete files in one file format for tests."""

    def __init__(self, directory: str, file_format: str = CoreOptions.FILE_FORMAT_PARQUET):
        self.directory = directory
        self.file_format = file_format
        os.makedirs(directory, exist_ok=True)

    def write_data_file(self, schema: TableSchema, rows: List[Dict[str, Any]],
                        partition: GenericRow = PARTITION) -> DataFileMeta:
        path = self._new_path("data")
        self._write(path, schema.fields, rows)
        return DataFileMeta.create(path, partition, len(rows), os.path.getsize(path), schema.id, self.file_format)

    def write_position_deletes(self, deletes: Sequence[Tuple[Optional[str], Optional[int]]],
                               partition: GenericRow = PARTITION, nullable: bool = False) -> DeleteFileMeta:
        path = self._new_path("pos-deletes")
        fields = [f.as_optional() for f in POSITION_DELETE_FIELDS] if nullable else POSITION_DELETE_FIELDS
        self._write(path, fields, [{"file_path": p, "pos": pos} for p, pos in deletes])
        return DeleteFileMeta.position_deletes(path, partition, len(deletes), os.path.getsize(path),
                                               self.file_format)

    def write_equality_deletes(self, fields: List[DataField], rows: List[Dict[str, Any]],
                               partition: GenericRow = PARTITION) -> DeleteFileMeta:
        path = self._new_path("eq-deletes")
        self._write(path, fields, rows)
        return DeleteFileMeta.equality_deletes(path, partition, len(rows), tuple(f.id for f in fields),
                                               os.path.getsize(path), self.file_format)

    def _new_path(self, prefix: str) -> str:
        return os.path.join(self.directory, f"{prefix}-{uuid.uuid4()}.{self.file_format}")

    def _write(self, path: str, fields: List[DataField], rows: List[Dict[str, Any]]):
        schema = PyarrowFieldParser.from_data_fields(fields)
        table = pa.Table.from_pylist(rows, schema=schema)
        if self.file_format == CoreOptions.FILE_FORMAT_PARQUET:
            pq.write_table(table, path)
        elif self.file_format == CoreOptions.FILE_FORMAT_ORC:
            orc.write_table(table, path)
        elif self.file_format == CoreOptions.FILE_FORMAT_AVRO:
            avro_schema = fastavro.parse_schema(PyarrowFieldParser.to_avro_schema(schema))
            with open(path, 'wb') as f:
                fastavro.writer(f, avro_schema, rows)
        else:
            raise ValueError(f"Unsupported file format: {self.file_format}")
