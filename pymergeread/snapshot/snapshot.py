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

from dataclasses import dataclass, field
from typing import Optional, Tuple

from pymergeread.manifest.schema.data_file_meta import DataFileMeta
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta


@dataclass(frozen=True)
class Snapshot:
    """An immutable view of the live data and delete files of a table at one point in time."""
    id: int
    sequence_number: int
    schema_id: int
    commit_kind: str
    time_millis: int
    parent_id: Optional[int] = None
    data_files: Tuple[DataFileMeta, ...] = field(default_factory=tuple)
    delete_files: Tuple[DeleteFileMeta, ...] = field(default_factory=tuple)

    @property
    def total_record_count(self) -> int:
        return sum(f.row_count for f in self.data_files)

    def __str__(self):
        return (f"Snapshot(id={self.id}, seq={self.sequence_number}, kind={self.commit_kind}, "
                f"data_files={len(self.data_files)}, delete_files={len(self.delete_files)})")
