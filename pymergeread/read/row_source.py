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

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import pyarrow
from pyarrow import RecordBatch

from pymergeread.common.exceptions import DataCorruption, IOFailure, ScanException
from pymergeread.common.file_io import FileIO
from pymergeread.common.options.core_options import CoreOptions
from pymergeread.read.reader.format_avro_reader import FormatAvroReader
from pymergeread.read.reader.format_pyarrow_reader import FormatPyArrowReader
from pymergeread.read.reader.iface.record_batch_reader import RecordBatchReader

logger = logging.getLogger(__name__)


class RowSource(ABC):
    """Opens physical files as streams of arrow batches in the file's natural row order."""

    @abstractmethod
    def open(self, file_path: str, file_format: str, read_fields: List[str]) -> RecordBatchReader:
        """
        Opens the file and returns a reader of the named physical columns.

        Raises:
            IOFailure: the file is missing or unreadable.
            DataCorruption: the file cannot be decoded.
        """


class FileRowSource(RowSource):

    def __init__(self, file_io: FileIO, batch_size: int = 4096):
        self.file_io = file_io
        self.batch_size = batch_size

    def open(self, file_path: str, file_format: str, read_fields: List[str]) -> RecordBatchReader:
        self.file_io.check_exists(file_path)
        try:
            if file_format == CoreOptions.FILE_FORMAT_AVRO:
                format_reader = FormatAvroReader(self.file_io, file_path, read_fields, self.batch_size)
            elif file_format in (CoreOptions.FILE_FORMAT_PARQUET, CoreOptions.FILE_FORMAT_ORC):
                format_reader = FormatPyArrowReader(self.file_io, file_format, file_path, read_fields,
                                                    self.batch_size)
            else:
                raise ValueError(f"Unexpected file format: {file_format}")
        except ScanException:
            raise
        except OSError as e:
            raise IOFailure(f"Failed to open {file_format} file: {e}", file_path) from e
        except (pyarrow.ArrowException, ValueError) as e:
            raise DataCorruption(f"Failed to decode {file_format} file: {e}", file_path) from e
        logger.debug("Opened %s file %s reading columns %s", file_format, file_path, read_fields)
        return ErrorTranslatingReader(format_reader, file_path)


class ErrorTranslatingReader(RecordBatchReader):
    """Reports decode and I/O errors raised while reading batches as scan errors of the file."""

    def __init__(self, reader: RecordBatchReader, file_path: str):
        self._reader = reader
        self.file_path = file_path

    def read_arrow_batch(self) -> Optional[RecordBatch]:
        try:
            return self._reader.read_arrow_batch()
        except ScanException:
            raise
        except OSError as e:
            raise IOFailure(f"Failed to read file: {e}", self.file_path) from e
        except (pyarrow.ArrowException, ValueError, TypeError, EOFError) as e:
            raise DataCorruption(f"Malformed row: {e}", self.file_path) from e

    def close(self):
        self._reader.close()
