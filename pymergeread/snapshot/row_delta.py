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

from typing import List, Optional

from pymergeread.manifest.schema.data_file_meta import DataFileMeta
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.schema.data_types import DataType
from pymergeread.schema.table_schema import TableSchema
from pymergeread.snapshot.snapshot import Snapshot


class RowDelta:
    """
    An atomic commit adding data files and delete files. Nothing is visible until commit() and
    a builder can be committed only once.
    """

    def __init__(self, metadata, commit_kind: str):
        from pymergeread.snapshot.table_metadata import InMemoryTableMetadata

        self.metadata: InMemoryTableMetadata = metadata
        self.commit_kind = commit_kind
        self._data_files: List[DataFileMeta] = []
        self._delete_files: List[DeleteFileMeta] = []
        self._committed: Optional[Snapshot] = None

    def append_file(self, data_file: DataFileMeta) -> 'RowDelta':
        self._data_files.append(data_file)
        return self

    def add_rows(self, data_file: DataFileMeta) -> 'RowDelta':
        return self.append_file(data_file)

    def add_deletes(self, delete_file: DeleteFileMeta) -> 'RowDelta':
        self._delete_files.append(delete_file)
        return self

    def commit(self) -> Snapshot:
        if self._committed is not None:
            raise RuntimeError("Row delta has already been committed")
        self._committed = self.metadata.commit_files(self.commit_kind, self._data_files, self._delete_files)
        return self._committed


class SchemaUpdate:
    """Read-time relevant schema evolution: relaxing nullability and adding optional columns."""

    def __init__(self, metadata):
        from pymergeread.snapshot.table_metadata import InMemoryTableMetadata

        self.metadata: InMemoryTableMetadata = metadata
        self._schema: TableSchema = metadata.schema()
        self._changed = False

    def make_column_optional(self, name: str) -> 'SchemaUpdate':
        self._schema = self._schema.make_column_optional(name)
        self._changed = True
        return self

    def add_column(self, name: str, data_type: DataType) -> 'SchemaUpdate':
        self._schema = self._schema.add_column(name, data_type)
        self._changed = True
        return self

    def commit(self) -> TableSchema:
        if not self._changed:
            return self._schema
        # consecutive changes collapse into a single new schema version
        base_id = self.metadata.schema().id
        schema = TableSchema(base_id + 1, self._schema.fields, self._schema.partition_keys,
                             self._schema.highest_field_id, self._schema.options)
        return self.metadata.commit_schema(schema)
