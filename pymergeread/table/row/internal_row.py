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

from abc import ABC, abstractmethod
from typing import Any, Tuple


class InternalRow(ABC):
    """
    Base interface for an internal data structure representing a row of a table, independent
    of the physical encoding it was decoded from.
    """

    @abstractmethod
    def get_field(self, pos: int) -> Any:
        """
        Returns the value at the given position.
        """

    def is_null_at(self, pos: int) -> bool:
        """
        Returns true if the element is null at the given position.
        """
        return self.get_field(pos) is None

    @abstractmethod
    def __len__(self) -> int:
        """
        Returns the number of fields in this row.
        """

    def to_tuple(self) -> Tuple:
        return tuple(self.get_field(pos) for pos in range(len(self)))

    def __str__(self) -> str:
        fields = []
        for pos in range(self.__len__()):
            value = self.get_field(pos)
            fields.append(str(value))
        return " ".join(fields)
