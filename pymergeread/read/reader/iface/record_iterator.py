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
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class RecordIterator(Generic[T], ABC):
    """
    An internal iterator interface which presents a more restrictive API than Iterator
    """

    @abstractmethod
    def next(self) -> Optional[T]:
        """
        Gets the next record from the iterator. Returns None if this iterator has no more elements.
        """

    def return_pos(self) -> int:
        """
        Returns the position in the file of the record last returned by next().
        """
        raise NotImplementedError(f"{type(self).__name__} does not track row positions")
