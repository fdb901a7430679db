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
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from pymergeread.manifest.schema.data_file_meta import DataFileMeta
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.read.plan import Plan
from pymergeread.read.scan_task import FileScanTask
from pymergeread.snapshot.snapshot import Snapshot
from pymergeread.snapshot.table_metadata import TableMetadata
from pymergeread.table.row.generic_row import GenericRow

logger = logging.getLogger(__name__)

SequenceComparator = Callable[[int, int], bool]
PartitionFilter = Callable[[GenericRow], bool]


def default_sequence_comparator(delete_sequence_number: int, data_sequence_number: int) -> bool:
    """A delete file applies to data files committed before it or in the same commit."""
    return delete_sequence_number >= data_sequence_number


class ScanPlanner:
    """
    Associates every data file of a snapshot with the delete files that apply to it: those of
    the same partition whose sequence number passes the sequence comparator. Position delete
    files are not matched by path here, that is left to the DeleteFilter.
    """

    def __init__(self, metadata: TableMetadata, snapshot: Optional[Snapshot] = None,
                 sequence_comparator: Optional[SequenceComparator] = None,
                 partition_filter: Optional[PartitionFilter] = None):
        self.metadata = metadata
        self.snapshot = snapshot if snapshot is not None else metadata.current_snapshot()
        self.sequence_comparator = sequence_comparator or default_sequence_comparator
        self.partition_filter = partition_filter

    def plan(self) -> Plan:
        if self.snapshot is None:
            logger.info("Table has no snapshot, nothing to scan")
            return Plan([])

        deletes_by_partition: Dict[GenericRow, List[DeleteFileMeta]] = defaultdict(list)
        for delete_file in self.snapshot.delete_files:
            deletes_by_partition[delete_file.partition].append(delete_file)

        tasks = []
        for data_file in self.snapshot.data_files:
            if self.partition_filter is not None and not self.partition_filter(data_file.partition):
                continue
            deletes = self._applicable_deletes(data_file, deletes_by_partition.get(data_file.partition, []))
            tasks.append(FileScanTask(data_file, tuple(deletes)))

        plan = Plan(tasks, self.snapshot)
        logger.info("Planned snapshot %d: %d of %d data files (%d rows) with %d delete files",
                    self.snapshot.id, len(tasks), len(self.snapshot.data_files), self.snapshot.total_record_count,
                    plan.delete_file_count())
        return plan

    def _applicable_deletes(self, data_file: DataFileMeta,
                            candidates: List[DeleteFileMeta]) -> List[DeleteFileMeta]:
        return [delete_file for delete_file in candidates
                if self.sequence_comparator(delete_file.sequence_number, data_file.sequence_number)]
