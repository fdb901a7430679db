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
from typing import List

from pymergeread.common.exceptions import SchemaMismatch
from pymergeread.deletes.delete_filter import DeleteFilter
from pymergeread.read.reader.data_file_batch_reader import DataFileBatchReader
from pymergeread.read.reader.iface.record_batch_reader import (RecordBatchReader,
                                                               RowPositionReader)
from pymergeread.read.reader.projected_batch_reader import ProjectedBatchReader
from pymergeread.read.row_source import ErrorTranslatingReader
from pymergeread.read.scan_task import FileScanTask
from pymergeread.schema.data_types import DataField
from pymergeread.schema.schema_resolver import SchemaResolver
from pymergeread.schema.table_schema import TableSchema

logger = logging.getLogger(__name__)


class TaskRead:
    """
    Reads one FileScanTask: the data file's rows, in file order, minus the deleted ones,
    projected onto the requested fields.

    The reader chain is DataFileBatchReader -> RowPositionReader -> ApplyDeleteFilterReader
    -> ProjectedBatchReader. Delete files are parsed before the data file is opened, so a
    broken delete file fails the task before any row is produced.
    """

    def __init__(self, table, table_schema: TableSchema, read_fields: List[DataField], task: FileScanTask):
        from pymergeread.table.file_store_table import FileStoreTable

        self.table: FileStoreTable = table
        self.table_schema = table_schema
        self.read_fields = read_fields
        self.task = task

    def create_reader(self) -> RecordBatchReader:
        data_file = self.task.data_file
        delete_indexes = self.table.load_delete_indexes(self.task.deletes, self.table_schema)

        read_fields = list(self.read_fields)
        read_ids = {field.id for field in read_fields}
        for index in delete_indexes:
            for field_id in index.equality_field_ids:
                if field_id in read_ids:
                    continue
                field = self.table_schema.find_field(field_id)
                if field is None:
                    raise SchemaMismatch(field_id, data_file.file_path)
                read_fields.append(field)
                read_ids.add(field_id)

        delete_filter = DeleteFilter.create(data_file, delete_indexes, read_fields,
                                            self.table.options.position_delete_check_bounds())

        file_schema = self.table.metadata.schema_by_id(data_file.schema_id)
        resolver = SchemaResolver(file_schema.fields, data_file.file_path)
        physical_names = resolver.physical_names(read_fields)
        names_to_read = [name for name in physical_names if name is not None]
        if not names_to_read:
            # row positions still need one physical column to count rows
            names_to_read = [file_schema.fields[0].name]

        format_reader = self.table.row_source.open(data_file.file_path, data_file.file_format, names_to_read)
        # casts to the table types may fail on values the file holds
        reader: RecordBatchReader = RowPositionReader(ErrorTranslatingReader(
            DataFileBatchReader(format_reader, physical_names, read_fields), data_file.file_path))
        if delete_filter.has_deletes():
            reader = delete_filter.filter(reader)
        if len(read_fields) != len(self.read_fields):
            reader = ProjectedBatchReader(reader, list(range(len(self.read_fields))))
        logger.debug("Created reader for %s reading %s", self.task, [f.name for f in read_fields])
        return reader
