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
from typing import Tuple

from pymergeread.manifest.schema.data_file_meta import DataFileMeta
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.table.row.generic_row import GenericRow


@dataclass(frozen=True)
class FileScanTask:
    """One data file of a snapshot together with every delete file that applies to it."""
    data_file: DataFileMeta
    deletes: Tuple[DeleteFileMeta, ...] = field(default_factory=tuple)

    @property
    def file_path(self) -> str:
        return self.data_file.file_path

    @property
    def partition(self) -> GenericRow:
        return self.data_file.partition

    @property
    def row_count(self) -> int:
        return self.data_file.row_count

    def __str__(self):
        return f"FileScanTask(file='{self.data_file.file_path}', deletes={[d.file_path for d in self.deletes]})"
