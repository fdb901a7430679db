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

import fastavro
import pyarrow as pa
from pyarrow import RecordBatch

from pymergeread.common.file_io import FileIO
from pymergeread.read.reader.iface.record_batch_reader import RecordBatchReader


class FormatAvroReader(RecordBatchReader):
    """
    An ArrowBatchReader for reading Avro files using fastavro, converting Avro records to
    RecordBatch format in the order they are stored. Every requested column must be written
    in the file.
    """

    def __init__(self, file_io: FileIO, file_path: str, read_fields: List[str], batch_size: int = 4096):
        self._file = file_io.new_input_stream(file_path)
        try:
            self._avro_reader = fastavro.reader(self._file)
            file_fields = {field["name"] for field in self._avro_reader.writer_schema["fields"]}
            missing_fields = [name for name in read_fields if name not in file_fields]
            if missing_fields:
                raise ValueError(f"Columns {missing_fields} are not present in avro file {file_path}")
        except Exception:
            self.close()
            raise
        self._batch_size = batch_size
        self._fields = read_fields

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        pydict_data = {name: [] for name in self._fields}
        records_in_batch = 0

        for record in self._avro_reader:
            for col_name in self._fields:
                pydict_data[col_name].append(record.get(col_name))
            records_in_batch += 1
            if records_in_batch >= self._batch_size:
                break

        if records_in_batch == 0:
            return None
        return pa.RecordBatch.from_pydict(pydict_data)

    def close(self):
        if self._file:
            self._file.close()
            self._file = None
