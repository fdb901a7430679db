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

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from pymergeread.manifest.schema.data_file_meta import format_of
from pymergeread.manifest.schema.file_content import FileContent
from pymergeread.table.row.generic_row import GenericRow


@dataclass(frozen=True)
class DeleteFileMeta:
    """
    A delete file, either of position deletes, with rows of (file_path, pos), or of equality
    deletes, with rows carrying the columns named by equality_field_ids.
    """
    file_path: str
    file_format: str
    partition: GenericRow
    content: FileContent
    record_count: int
    file_size: int = 0
    equality_field_ids: Tuple[int, ...] = ()
    sequence_number: Optional[int] = None
    snapshot_id: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.content.is_delete():
            raise ValueError(f"Not a delete content: {self.content}")
        if self.content == FileContent.EQUALITY_DELETES and not self.equality_field_ids:
            raise ValueError(f"Equality delete file {self.file_path} declares no equality field ids")
        if self.content == FileContent.POSITION_DELETES and self.equality_field_ids:
            raise ValueError(f"Position delete file {self.file_path} must not declare equality field ids")

    @classmethod
    def position_deletes(cls, file_path: str, partition: GenericRow, record_count: int,
                         file_size: int = 0, file_format: Optional[str] = None) -> 'DeleteFileMeta':
        return cls(file_path=file_path, file_format=file_format or format_of(file_path), partition=partition,
                   content=FileContent.POSITION_DELETES, record_count=record_count, file_size=file_size)

    @classmethod
    def equality_deletes(cls, file_path: str, partition: GenericRow, record_count: int,
                         equality_field_ids: Tuple[int, ...], file_size: int = 0,
                         file_format: Optional[str] = None) -> 'DeleteFileMeta':
        return cls(file_path=file_path, file_format=file_format or format_of(file_path), partition=partition,
                   content=FileContent.EQUALITY_DELETES, record_count=record_count, file_size=file_size,
                   equality_field_ids=tuple(equality_field_ids))

    def cache_key(self) -> Tuple:
        return self.file_path, self.content, self.equality_field_ids

    def with_sequence_number(self, sequence_number: int, snapshot_id: int) -> 'DeleteFileMeta':
        return replace(self, sequence_number=sequence_number, snapshot_id=snapshot_id)

    def __str__(self):
        return (f"DeleteFileMeta(path='{self.file_path}', content={self.content.name}, "
                f"equality_field_ids={list(self.equality_field_ids)}, seq={self.sequence_number})")
