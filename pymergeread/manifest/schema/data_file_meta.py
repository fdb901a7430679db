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

import os
from dataclasses import dataclass, field, replace
from typing import Optional

from pymergeread.table.row.generic_row import GenericRow


def format_of(file_path: str) -> str:
    _, extension = os.path.splitext(file_path)
    return extension[1:].lower()


@dataclass(frozen=True)
class DataFileMeta:
    file_path: str
    file_format: str
    partition: GenericRow
    row_count: int
    file_size: int = 0
    schema_id: int = 0
    # assigned by the commit that adds the file
    sequence_number: Optional[int] = None
    snapshot_id: Optional[int] = field(default=None, compare=False)

    @classmethod
    def create(cls, file_path: str, partition: GenericRow, row_count: int, file_size: int = 0,
               schema_id: int = 0, file_format: Optional[str] = None) -> 'DataFileMeta':
        return cls(
            file_path=file_path,
            file_format=file_format or format_of(file_path),
            partition=partition,
            row_count=row_count,
            file_size=file_size,
            schema_id=schema_id,
        )

    def with_sequence_number(self, sequence_number: int, snapshot_id: int) -> 'DataFileMeta':
        return replace(self, sequence_number=sequence_number, snapshot_id=snapshot_id)

    def __str__(self):
        return (f"DataFileMeta(path='{self.file_path}', format={self.file_format}, "
                f"partition={self.partition}, rows={self.row_count}, seq={self.sequence_number})")
