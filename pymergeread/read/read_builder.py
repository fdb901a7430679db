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

from pymergeread.read.scanner.scan_planner import PartitionFilter, SequenceComparator
from pymergeread.read.table_read import TableRead
from pymergeread.read.table_scan import TableScan
from pymergeread.schema.data_types import DataField
from pymergeread.schema.table_schema import TableSchema


class ReadBuilder:
    """Implementation of ReadBuilder for native Python reading."""

    def __init__(self, table):
        from pymergeread.table.file_store_table import FileStoreTable

        self.table: FileStoreTable = table
        self._projection: Optional[List[str]] = None
        self._snapshot_id: Optional[int] = None
        self._partition_filter: Optional[PartitionFilter] = None
        self._sequence_comparator: Optional[SequenceComparator] = None

    def with_projection(self, projection: Optional[List[str]]) -> 'ReadBuilder':
        self._projection = projection
        return self

    def with_snapshot(self, snapshot_id: Optional[int]) -> 'ReadBuilder':
        self._snapshot_id = snapshot_id
        return self

    def with_partition_filter(self, partition_filter: PartitionFilter) -> 'ReadBuilder':
        self._partition_filter = partition_filter
        return self

    def with_sequence_comparator(self, sequence_comparator: SequenceComparator) -> 'ReadBuilder':
        """
        Replaces the rule deciding whether a delete file applies to a data file, given their
        sequence numbers. By default a delete file applies to data files of lower or equal
        sequence number.
        """
        self._sequence_comparator = sequence_comparator
        return self

    def new_scan(self) -> TableScan:
        return TableScan(
            table=self.table,
            snapshot_id=self._snapshot_id,
            partition_filter=self._partition_filter,
            sequence_comparator=self._sequence_comparator
        )

    def new_read(self) -> TableRead:
        return TableRead(
            table=self.table,
            table_schema=self.read_schema(),
            read_type=self.read_type()
        )

    def read_schema(self) -> TableSchema:
        return self.table.schema_at(self._snapshot_id)

    def read_type(self) -> List[DataField]:
        return self.read_schema().project(self._projection)
