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
from typing import Dict, Iterator, List, Optional, Sequence, Union

from pymergeread.common.file_io import FileIO
from pymergeread.common.options.core_options import CoreOptions
from pymergeread.common.options.options import Options
from pymergeread.deletes.delete_filter import DeleteFilter
from pymergeread.deletes.delete_index import DeleteIndex
from pymergeread.deletes.delete_index_cache import DeleteIndexCache
from pymergeread.deletes.delete_index_loader import DeleteIndexLoader
from pymergeread.manifest.schema.data_file_meta import DataFileMeta
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.read.read_builder import ReadBuilder
from pymergeread.read.row_source import FileRowSource, RowSource
from pymergeread.schema.data_types import DataField
from pymergeread.schema.table_schema import TableSchema
from pymergeread.snapshot.table_metadata import TableMetadata
from pymergeread.table.row.internal_row import InternalRow

logger = logging.getLogger(__name__)


class FileStoreTable:
    """
    A merge-on-read table: the data files and delete files of its snapshots, read through
    a RowSource and reconciled at read time.
    """

    def __init__(self, metadata: TableMetadata, file_io: Optional[FileIO] = None,
                 options: Union[Options, Dict[str, str], None] = None,
                 row_source: Optional[RowSource] = None):
        self.metadata = metadata
        options = options if isinstance(options, Options) else Options(options)
        self.options = CoreOptions(options)
        if row_source is None:
            if file_io is None:
                raise ValueError("Either a FileIO or a RowSource is required to read a table")
            row_source = FileRowSource(file_io, self.options.read_batch_size())
        self.file_io = file_io
        self.row_source = row_source
        self.delete_index_loader = DeleteIndexLoader(row_source)
        self.delete_index_cache: Optional[DeleteIndexCache] = None
        if self.options.delete_index_cache_enabled():
            self.delete_index_cache = DeleteIndexCache(self.options.delete_index_cache_max_entries())

    @property
    def fields(self) -> List[DataField]:
        return self.metadata.schema().fields

    def schema(self) -> TableSchema:
        return self.metadata.schema()

    def schema_at(self, snapshot_id: Optional[int] = None) -> TableSchema:
        """Returns the schema the given snapshot was committed with, or the current schema."""
        if snapshot_id is None:
            return self.metadata.schema()
        return self.metadata.schema_by_id(self.metadata.snapshot(snapshot_id).schema_id)

    def new_read_builder(self) -> ReadBuilder:
        return ReadBuilder(self)

    def scan(self, snapshot_id: Optional[int] = None, columns: Optional[List[str]] = None) -> Iterator[InternalRow]:
        """
        Lazily yields the live rows of the given snapshot, or of the current one, projected
        onto the given column names. None or '*' selects every column.
        """
        read_builder = self.new_read_builder().with_snapshot(snapshot_id).with_projection(columns)
        plan = read_builder.new_scan().plan()
        return read_builder.new_read().to_iterator(plan.tasks())

    def load_delete_indexes(self, delete_files: Sequence[DeleteFileMeta],
                            table_schema: Optional[TableSchema] = None) -> List[DeleteIndex]:
        table_schema = table_schema or self.metadata.schema()
        indexes = []
        for delete_file in delete_files:
            if self.delete_index_cache is None:
                indexes.append(self.delete_index_loader.load(delete_file, table_schema))
            else:
                indexes.append(self.delete_index_cache.get_or_load(
                    delete_file.cache_key(),
                    lambda f=delete_file: self.delete_index_loader.load(f, table_schema)))
        return indexes

    def delete_filter(self, data_file: DataFileMeta, delete_files: Sequence[DeleteFileMeta],
                      read_fields: Optional[List[DataField]] = None) -> DeleteFilter:
        """
        Builds the DeleteFilter of a data file, usable as a predicate over (position, row) with
        rows laid out as read_fields, all table fields by default.
        """
        table_schema = self.metadata.schema()
        indexes = self.load_delete_indexes(delete_files, table_schema)
        return DeleteFilter.create(data_file, indexes, read_fields or table_schema.fields,
                                   self.options.position_delete_check_bounds())
