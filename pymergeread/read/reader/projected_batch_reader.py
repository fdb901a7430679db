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

from pyarrow import RecordBatch

from pymergeread.read.reader.iface.record_batch_reader import RecordBatchReader
from pymergeread.read.reader.iface.record_iterator import RecordIterator
from pymergeread.table.row.internal_row import InternalRow
from pymergeread.table.row.projected_row import ProjectedRow


class ProjectedBatchReader(RecordBatchReader):
    """
    Re-projects the rows of the wrapped reader onto a subset of its columns, without
    copying the underlying data.
    """

    def __init__(self, reader: RecordBatchReader, index_mapping: List[int]):
        self._reader = reader
        self.index_mapping = index_mapping

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        batch = self._reader.read_arrow_batch()
        if batch is None:
            return None
        return batch.select(self.index_mapping)

    def return_batch_pos(self) -> int:
        return self._reader.return_batch_pos()

    def read_batch(self) -> Optional[RecordIterator[InternalRow]]:
        batch = self._reader.read_batch()
        if batch is None:
            return None
        return ProjectedRecordIterator(batch, self.index_mapping)

    def close(self):
        self._reader.close()


class ProjectedRecordIterator(RecordIterator[InternalRow]):

    def __init__(self, iterator: RecordIterator[InternalRow], index_mapping: List[int]):
        self._iterator = iterator
        self._index_mapping = index_mapping

    def next(self) -> Optional[InternalRow]:
        record = self._iterator.next()
        if record is None:
            return None
        return ProjectedRow(self._index_mapping).replace_row(record)

    def return_pos(self) -> int:
        return self._iterator.return_pos()
