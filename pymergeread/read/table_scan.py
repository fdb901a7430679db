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

from pymergeread.read.plan import Plan
from pymergeread.read.scanner.scan_planner import (PartitionFilter, ScanPlanner,
                                                   SequenceComparator)


class TableScan:
    """Implementation of TableScan for native Python reading."""

    def __init__(self, table, snapshot_id: Optional[int] = None,
                 partition_filter: Optional[PartitionFilter] = None,
                 sequence_comparator: Optional[SequenceComparator] = None):
        from pymergeread.table.file_store_table import FileStoreTable

        self.table: FileStoreTable = table
        self.snapshot_id = snapshot_id
        self.partition_filter = partition_filter
        self.sequence_comparator = sequence_comparator

    def plan(self) -> Plan:
        metadata = self.table.metadata
        snapshot = metadata.snapshot(self.snapshot_id) if self.snapshot_id is not None else None
        return ScanPlanner(metadata, snapshot, self.sequence_comparator, self.partition_filter).plan()
