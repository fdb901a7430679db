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

import pyarrow.dataset as ds
from pyarrow import RecordBatch

from pymergeread.common.file_io import FileIO
from pymergeread.read.reader.iface.record_batch_reader import RecordBatchReader


class FormatPyArrowReader(RecordBatchReader):
    """
    A Format Reader that reads record batches from a Parquet or ORC file using PyArrow,
    keeping the physical row order of the file. Every requested column must be present in
    the file.
    """

    def __init__(self, file_io: FileIO, file_format: str, file_path: str, read_fields: List[str],
                 batch_size: int = 4096):
        file_path_for_pyarrow = file_io.to_filesystem_path(file_path)
        self.dataset = ds.dataset(file_path_for_pyarrow, format=file_format, filesystem=file_io.filesystem)
        self.read_fields = read_fields

        file_schema_names = set(self.dataset.schema.names)
        missing_fields = [field for field in read_fields if field not in file_schema_names]
        if missing_fields:
            raise ValueError(f"Columns {missing_fields} are not present in {file_format} file {file_path}")

        # no filter is pushed down: row positions must stay those of the file
        self.reader = self.dataset.scanner(
            columns=read_fields,
            batch_size=batch_size,
            use_threads=False,
        ).to_reader()

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        try:
            return self.reader.read_next_batch()
        except StopIteration:
            return None

    def close(self):
        if self.reader is not None:
            self.reader = None
