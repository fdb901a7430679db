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

from typing import Dict, List, Optional, Sequence

from pymergeread.common.exceptions import SchemaMismatch
from pymergeread.schema.data_types import DataField

NULL_FIELD_INDEX = -1


class SchemaResolver:
    """
    Resolves fields of the current table schema against the fields a data file was written
    with. Matching is done by field id, so renamed columns are still found and columns added
    after the file was written resolve to nothing.
    """

    def __init__(self, file_fields: List[DataField], file_path: Optional[str] = None):
        self.file_fields = file_fields
        self.file_path = file_path
        self._file_fields_by_id: Dict[int, DataField] = {field.id: field for field in file_fields}

    def physical_name(self, field_id: int) -> Optional[str]:
        field = self._file_fields_by_id.get(field_id)
        return field.name if field is not None else None

    def physical_names(self, read_fields: Sequence[DataField]) -> List[Optional[str]]:
        return [self.physical_name(field.id) for field in read_fields]

    def contains(self, field_id: int) -> bool:
        return field_id in self._file_fields_by_id

    @staticmethod
    def index_mapping(target_fields: Sequence[DataField], source_fields: Sequence[DataField]) -> List[int]:
        """
        For each target field, the position of the field with the same id in the source fields,
        or NULL_FIELD_INDEX when the source does not carry it.
        """
        field_id_to_index = {field.id: i for i, field in enumerate(source_fields)}
        return [field_id_to_index.get(field.id, NULL_FIELD_INDEX) for field in target_fields]

    @staticmethod
    def positions_of(field_ids: Sequence[int], fields: Sequence[DataField],
                     file_path: Optional[str] = None) -> List[int]:
        field_id_to_index = {field.id: i for i, field in enumerate(fields)}
        positions = []
        for field_id in field_ids:
            index = field_id_to_index.get(field_id)
            if index is None:
                raise SchemaMismatch(field_id, file_path)
            positions.append(index)
        return positions
