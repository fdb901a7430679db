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

import pyarrow as pa
from pyarrow import RecordBatch

from pymergeread.read.reader.iface.record_batch_reader import RecordBatchReader
from pymergeread.schema.data_types import DataField, PyarrowFieldParser


class DataFileBatchReader(RecordBatchReader):
    """
    Maps the physical columns of a data file onto the table fields being read: columns are
    renamed to their current names, cast to their current types, and fields the file was
    written without are filled with nulls.
    """

    def __init__(self, format_reader: RecordBatchReader, physical_names: List[Optional[str]],
                 fields: List[DataField]):
        self.format_reader = format_reader
        self.physical_names = physical_names
        self.fields = fields
        self.schema = nullable_schema(PyarrowFieldParser.from_data_fields(fields))

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        record_batch = self.format_reader.read_arrow_batch()
        if record_batch is None:
            return None

        columns = []
        for physical_name, pa_field in zip(self.physical_names, self.schema):
            if physical_name is None:
                columns.append(pa.nulls(record_batch.num_rows, type=pa_field.type))
                continue
            column = record_batch.column(record_batch.schema.get_field_index(physical_name))
            if column.type != pa_field.type:
                column = column.cast(pa_field.type)
            columns.append(column)
        return pa.RecordBatch.from_arrays(columns, schema=self.schema)

    def close(self):
        self.format_reader.close()


def nullable_schema(schema: pa.Schema) -> pa.Schema:
    # nullability is enforced by the table, not by the batches handed to readers
    return pa.schema([pa.field(f.name, f.type, nullable=True, metadata=f.metadata) for f in schema])
