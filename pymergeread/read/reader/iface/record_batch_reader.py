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

from abc import abstractmethod
from typing import Iterator, Optional

import polars
from pyarrow import RecordBatch

from pymergeread.read.reader.iface.record_iterator import RecordIterator
from pymergeread.read.reader.iface.record_reader import RecordReader
from pymergeread.table.row.internal_row import InternalRow
from pymergeread.table.row.offset_row import OffsetRow


class RecordBatchReader(RecordReader[InternalRow]):
    """
    The reader that reads the pyarrow batches of records.
    """

    @abstractmethod
    def read_arrow_batch(self) -> Optional[RecordBatch]:
        """
        Reads one batch. The method should return None when reaching the end of the input.
        """

    def return_batch_pos(self) -> int:
        """
        Returns the number of rows of the file consumed so far, i.e. the position right after the
        last row of the batch returned by read_arrow_batch().
        """
        raise NotImplementedError(f"{type(self).__name__} does not track row positions")

    def read_next_df(self) -> Optional[polars.DataFrame]:
        arrow_batch = self.read_arrow_batch()
        if arrow_batch is None:
            return None
        return polars.from_arrow(arrow_batch)

    def read_batch(self) -> Optional[RecordIterator[InternalRow]]:
        df = self.read_next_df()
        if df is None:
            return None
        return InternalRowWrapperIterator(df.iter_rows(), df.width)


class InternalRowWrapperIterator(RecordIterator[InternalRow]):
    def __init__(self, iterator: Iterator[tuple], width: int):
        self._iterator = iterator
        self._width = width

    def next(self) -> Optional[InternalRow]:
        row_tuple = next(self._iterator, None)
        if row_tuple is None:
            return None
        return OffsetRow(row_tuple, 0, self._width)


class RowPositionReader(RecordBatchReader):
    """
    Tracks the 0-based position of every row in the file's natural order, so that position
    deletes can be matched against the rows being read.
    """

    def __init__(self, data_reader: RecordBatchReader):
        self._data_reader = data_reader
        self.batch_pos = 0

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        batch = self._data_reader.read_arrow_batch()
        if batch is None:
            return None
        self.batch_pos += batch.num_rows
        return batch

    def return_batch_pos(self) -> int:
        return self.batch_pos

    def read_batch(self) -> Optional[RecordIterator[InternalRow]]:
        batch = self.read_arrow_batch()
        if batch is None:
            return None
        df = polars.from_arrow(batch)
        return RowPositionRecordIterator(df.iter_rows(), df.width, self.batch_pos - batch.num_rows)

    def close(self):
        self._data_reader.close()


class RowPositionRecordIterator(RecordIterator[InternalRow]):

    def __init__(self, iterator: Iterator[tuple], width: int, start_pos: int):
        self._iterator = iterator
        self._width = width
        self.pos = start_pos - 1

    def next(self) -> Optional[InternalRow]:
        row_tuple = next(self._iterator, None)
        if row_tuple is None:
            return None
        self.pos += 1
        return OffsetRow(row_tuple, 0, self._width)

    def return_pos(self) -> int:
        return self.pos
