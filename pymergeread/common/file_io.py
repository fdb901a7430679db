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
import os
import re
from typing import Any, Dict
from urllib.parse import urlparse

import pyarrow
import pyarrow.fs
from packaging.version import parse
from pyarrow.fs import FileSystem

from pymergeread.common.exceptions import IOFailure
from pymergeread.common.options.config import S3Options
from pymergeread.common.options.options import Options

logger = logging.getLogger(__name__)


class FileIO:
    """Resolves a pyarrow filesystem from a location and opens files on it for reading."""

    def __init__(self, path: str, options: Options):
        self.properties = options
        scheme, _, _ = self.parse_location(path)
        if scheme in {"s3", "s3a", "s3n"}:
            self.filesystem = self._initialize_s3_fs()
        elif scheme in {"file"}:
            self.filesystem = self._initialize_local_fs()
        else:
            raise ValueError(f"Unrecognized filesystem type in URI: {scheme}")

    @staticmethod
    def parse_location(location: str):
        uri = urlparse(location)
        if not uri.scheme or (len(uri.scheme) == 1 and not uri.netloc):
            return "file", uri.netloc, os.path.abspath(location)
        elif uri.scheme == "file":
            return "file", uri.netloc, uri.path
        else:
            return uri.scheme, uri.netloc, f"{uri.netloc}{uri.path}"

    @staticmethod
    def _create_s3_retry_config(
            max_attempts: int = 10,
            request_timeout: int = 60,
            connect_timeout: int = 60
    ) -> Dict[str, Any]:
        """
        AwsStandardS3RetryStrategy and timeout parameters are only available
        in PyArrow >= 8.0.0.
        """
        if parse(pyarrow.__version__) < parse("8.0.0"):
            return {}
        config = {
            'request_timeout': request_timeout,
            'connect_timeout': connect_timeout,
            'retry_strategy': pyarrow.fs.AwsStandardS3RetryStrategy(max_attempts=max_attempts),
        }
        return config

    def _initialize_s3_fs(self) -> FileSystem:
        from pyarrow.fs import S3FileSystem

        client_kwargs = {
            "endpoint_override": self.properties.get(S3Options.S3_ENDPOINT),
            "access_key": self.properties.get(S3Options.S3_ACCESS_KEY_ID),
            "secret_key": self.properties.get(S3Options.S3_ACCESS_KEY_SECRET),
            "session_token": self.properties.get(S3Options.S3_SECURITY_TOKEN),
            "region": self.properties.get(S3Options.S3_REGION),
            "force_virtual_addressing": True,
        }
        client_kwargs.update(self._create_s3_retry_config())
        return S3FileSystem(**client_kwargs)

    def _initialize_local_fs(self) -> FileSystem:
        from pyarrow.fs import LocalFileSystem

        return LocalFileSystem()

    def to_filesystem_path(self, path: str) -> str:
        parsed = urlparse(path)
        if not parsed.scheme or (len(parsed.scheme) == 1 and not parsed.netloc):
            # plain local path, possibly with a windows drive letter
            return str(path)
        normalized_path = re.sub(r'/+', '/', parsed.path) if parsed.path else ''
        if parsed.scheme == 'file':
            return normalized_path
        path_part = normalized_path.lstrip('/')
        return f"{parsed.netloc}/{path_part}" if path_part else parsed.netloc

    def new_input_stream(self, path: str):
        path_str = self.to_filesystem_path(path)
        try:
            return self.filesystem.open_input_file(path_str)
        except (OSError, pyarrow.ArrowException) as e:
            raise IOFailure(f"Failed to open file: {e}", path) from e

    def get_file_status(self, path: str):
        path_str = self.to_filesystem_path(path)
        return self.filesystem.get_file_info([path_str])[0]

    def exists(self, path: str) -> bool:
        try:
            return self.get_file_status(path).type != pyarrow.fs.FileType.NotFound
        except (OSError, pyarrow.ArrowException) as e:
            logger.debug("Failed to stat %s: %s", path, e)
            return False

    def check_exists(self, path: str) -> None:
        if not self.exists(path):
            raise IOFailure("File does not exist", path)

    def get_file_size(self, path: str) -> int:
        file_info = self.get_file_status(path)
        if file_info.size is None:
            raise IOFailure("File size not available", path)
        return file_info.size
