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

from typing import Optional


class ScanException(Exception):
    """Base exception of a failed scan task, always tagged with the offending file."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        self.file_path = file_path
        if file_path is not None:
            message = f"{message} (file: {file_path})"
        super().__init__(message)


class SchemaMismatch(ScanException):
    """A delete schema field id cannot be resolved in the schema being read"""

    def __init__(self, field_id: int, file_path: Optional[str] = None, reason: Optional[str] = None):
        self.field_id = field_id
        super().__init__(reason or f"Field id {field_id} is not present in the read schema", file_path)


class DataCorruption(ScanException):
    """Malformed row in a data or delete file"""


class IOFailure(ScanException, IOError):
    """The underlying file is missing or unreadable"""


class InvalidDeleteFile(ScanException):
    """A position delete points past the end of its data file"""

    def __init__(self, position: int, row_count: int, file_path: Optional[str] = None):
        self.position = position
        self.row_count = row_count
        super().__init__(
            f"Position delete {position} is out of range for data file with {row_count} rows", file_path)
