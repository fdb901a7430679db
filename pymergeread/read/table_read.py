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
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, List

import pandas
import pyarrow

from pymergeread.common.exceptions import ScanException
from pymergeread.read.reader.data_file_batch_reader import nullable_schema
from pymergeread.read.scan_task import FileScanTask
from pymergeread.read.task_read import TaskRead
from pymergeread.schema.data_types import DataField, PyarrowFieldParser
from pymergeread.schema.table_schema import TableSchema
from pymergeread.table.row.internal_row import InternalRow

logger = logging.getLogger(__name__)


class TableRead:
    """
    Implementation of TableRead for native Python reading. Every call re-opens the files of
    the tasks it is given, so the same tasks can be read any number of times.
    """

    def __init__(self, table, table_schema: TableSchema, read_type: List[DataField]):
        from pymergeread.table.file_store_table import FileStoreTable

        self.table: FileStoreTable = table
        self.table_schema = table_schema
        self.read_type = read_type

    @property
    def arrow_schema(self) -> pyarrow.Schema:
        return nullable_schema(PyarrowFieldParser.from_data_fields(self.read_type))

    def to_iterator(self, tasks: List[FileScanTask]) -> Iterator[InternalRow]:
        """
        Lazily yields the surviving rows of every task. If a task fails, the error is raised
        from the iterator and rows of that task already yielded must be discarded by the caller.
        """
        def _record_generator():
            for task in tasks:
                reader = self._create_reader(task)
                try:
                    for batch in iter(reader.read_batch, None):
                        yield from iter(batch.next, None)
                except ScanException:
                    logger.warning("Failed to read scan task %s", task, exc_info=True)
                    raise
                finally:
                    reader.close()

        return _record_generator()

    def to_arrow_batch_reader(self, tasks: List[FileScanTask]) -> pyarrow.RecordBatchReader:
        schema = self.arrow_schema
        batch_iterator = self._arrow_batch_generator(tasks)
        return pyarrow.RecordBatchReader.from_batches(schema, batch_iterator)

    def to_arrow(self, tasks: List[FileScanTask]) -> pyarrow.Table:
        """
        Reads every task fully before including it in the result, in parallel when
        'scan.parallelism' is greater than one.
        """
        max_workers = max(1, self.table.options.scan_parallelism())
        if max_workers == 1 or len(tasks) <= 1:
            task_batches = [self._read_task(task) for task in tasks]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                task_batches = list(executor.map(self._read_task, tasks))
        batches = [batch for batches in task_batches for batch in batches]
        return pyarrow.Table.from_batches(batches, schema=self.arrow_schema)

    def to_pandas(self, tasks: List[FileScanTask]) -> pandas.DataFrame:
        arrow_table = self.to_arrow(tasks)
        return arrow_table.to_pandas()

    def _arrow_batch_generator(self, tasks: List[FileScanTask]) -> Iterator[pyarrow.RecordBatch]:
        for task in tasks:
            reader = self._create_reader(task)
            try:
                for batch in iter(reader.read_arrow_batch, None):
                    if batch.num_rows > 0:
                        yield batch
            except ScanException:
                logger.warning("Failed to read scan task %s", task, exc_info=True)
                raise
            finally:
                reader.close()

    def _read_task(self, task: FileScanTask) -> List[pyarrow.RecordBatch]:
        return list(self._arrow_batch_generator([task]))

    def _create_reader(self, task: FileScanTask):
        try:
            return TaskRead(self.table, self.table_schema, self.read_type, task).create_reader()
        except ScanException:
            logger.warning("Failed to open scan task %s", task, exc_info=True)
            raise

