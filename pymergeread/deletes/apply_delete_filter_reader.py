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

from typing import Optional

from pyarrow import RecordBatch

from pymergeread.deletes.delete_filter import DeleteFilter
from pymergeread.read.reader.iface.record_batch_reader import RecordBatchReader
from pymergeread.read.reader.iface.record_iterator import RecordIterator
from pymergeread.table.row.internal_row import InternalRow


class ApplyDeleteFilterReader(RecordBatchReader):
    """
    A RecordReader which applies a DeleteFilter to filter records. The wrapped reader must
    track row positions, see RowPositionReader.
    """

    def __init__(self, reader: RecordBatchReader, delete_filter: DeleteFilter):
        self._reader = reader
        self._delete_filter = delete_filter

    def reader(self) -> RecordBatchReader:
        return self._reader

    def delete_filter(self) -> DeleteFilter:
        return self._delete_filter

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        arrow_batch = self._reader.read_arrow_batch()
        if arrow_batch is None:
            return None
        start_pos = self._reader.return_batch_pos() - arrow_batch.num_rows
        return self._delete_filter.apply(arrow_batch, start_pos)

    def read_batch(self) -> Optional[RecordIterator[InternalRow]]:
        batch = self._reader.read_batch()
        if batch is None:
            return None
        return ApplyDeleteFilterRecordIterator(batch, self._delete_filter)

    def close(self):
        self._reader.close()


class ApplyDeleteFilterRecordIterator(RecordIterator[InternalRow]):
    """
    A RecordIterator that wraps another RecordIterator and skips the records deleted by a
    DeleteFilter.
    """

    def __init__(self, iterator: RecordIterator[InternalRow], delete_filter: DeleteFilter):
        self._iterator = iterator
        self._delete_filter = delete_filter

    def return_pos(self) -> int:
        return self._iterator.return_pos()

    def next(self) -> Optional[InternalRow]:
        while True:
            record = self._iterator.next()
            if record is None:
                return None
            if not self._delete_filter.is_deleted(self._iterator.return_pos(), record):
                return record
