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

from typing import Any, List, Optional

from pymergeread.table.row.internal_row import InternalRow


class ProjectedRow(InternalRow):
    """
    An implementation of InternalRow which provides a projected view of the underlying InternalRow.
    Projection includes both reducing the accessible fields and reordering them. A negative index
    reads as null.
    Note: This class supports only top-level projections, not nested projections.
    """

    def __init__(self, index_mapping: List[int]):
        """
        Args:
            index_mapping: Array representing the mapping of fields. For example,
            [0, 2, 1] specifies to include in the following order the 1st field, the 3rd field
            and the 2nd field of the row.
        """
        self.index_mapping = index_mapping
        self.row: Optional[InternalRow] = None

    def replace_row(self, row: InternalRow) -> 'ProjectedRow':
        self.row = row
        return self

    def get_field(self, pos: int) -> Any:
        if self.index_mapping[pos] < 0:
            return None
        return self.row.get_field(self.index_mapping[pos])

    def is_null_at(self, pos: int) -> bool:
        if self.index_mapping[pos] < 0:
            return True
        return self.row.is_null_at(self.index_mapping[pos])

    def __len__(self) -> int:
        return len(self.index_mapping)

    def __str__(self) -> str:
        return f"ProjectedRow{{index_mapping={self.index_mapping}, row={self.row}}}"

    @staticmethod
    def from_index_mapping(projection: List[int]) -> 'ProjectedRow':
        return ProjectedRow(projection)
