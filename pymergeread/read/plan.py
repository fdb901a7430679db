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

from dataclasses import dataclass
from typing import List, Optional

from pymergeread.read.scan_task import FileScanTask
from pymergeread.snapshot.snapshot import Snapshot


@dataclass
class Plan:
    """The scan tasks of one snapshot. Tasks are independent and may be read in any order."""
    _tasks: List[FileScanTask]
    snapshot: Optional[Snapshot] = None

    def tasks(self) -> List[FileScanTask]:
        return self._tasks

    def delete_file_count(self) -> int:
        return len({d.file_path for task in self._tasks for d in task.deletes})

    def __len__(self) -> int:
        return len(self._tasks)
