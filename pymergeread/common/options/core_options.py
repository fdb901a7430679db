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

from pymergeread.common.options.config_option import ConfigOption
from pymergeread.common.options.config_options import ConfigOptions
from pymergeread.common.options.options import Options


class CoreOptions:
    """Core options of a merge-on-read table scan."""
    # File format constants
    FILE_FORMAT_ORC: str = "orc"
    FILE_FORMAT_AVRO: str = "avro"
    FILE_FORMAT_PARQUET: str = "parquet"

    FILE_FORMAT: ConfigOption[str] = (
        ConfigOptions.key("file.format")
        .string_type()
        .default_value(FILE_FORMAT_PARQUET)
        .with_description("Specify the format of data and delete files.")
    )

    READ_BATCH_SIZE: ConfigOption[int] = (
        ConfigOptions.key("read.batch-size")
        .int_type()
        .default_value(4096)
        .with_description("Number of rows per arrow batch produced by the row source.")
    )

    SCAN_PARALLELISM: ConfigOption[int] = (
        ConfigOptions.key("scan.parallelism")
        .int_type()
        .default_value(1)
        .with_description("Number of scan tasks read concurrently when materializing a scan.")
    )

    DELETE_INDEX_CACHE_ENABLED: ConfigOption[bool] = (
        ConfigOptions.key("delete-index.cache.enabled")
        .boolean_type()
        .default_value(True)
        .with_description("Whether parsed delete files are shared across scan tasks.")
    )

    DELETE_INDEX_CACHE_MAX_ENTRIES: ConfigOption[int] = (
        ConfigOptions.key("delete-index.cache.max-entries")
        .int_type()
        .default_value(128)
        .with_description("Maximum number of parsed delete files kept in the cache.")
    )

    POSITION_DELETE_CHECK_BOUNDS: ConfigOption[bool] = (
        ConfigOptions.key("scan.position-delete.check-bounds")
        .boolean_type()
        .default_value(True)
        .with_description(
            "Whether a position delete beyond the row count of its data file fails the scan task."
        )
    )

    def __init__(self, options: Options):
        self.options = options

    def file_format(self, default=None) -> str:
        return self.options.get(CoreOptions.FILE_FORMAT, default)

    def read_batch_size(self, default=None) -> int:
        return self.options.get(CoreOptions.READ_BATCH_SIZE, default)

    def scan_parallelism(self, default=None) -> int:
        return self.options.get(CoreOptions.SCAN_PARALLELISM, default)

    def delete_index_cache_enabled(self, default=None) -> bool:
        return self.options.get(CoreOptions.DELETE_INDEX_CACHE_ENABLED, default)

    def delete_index_cache_max_entries(self, default=None) -> int:
        return self.options.get(CoreOptions.DELETE_INDEX_CACHE_MAX_ENTRIES, default)

    def position_delete_check_bounds(self, default=None) -> bool:
        return self.options.get(CoreOptions.POSITION_DELETE_CHECK_BOUNDS, default)
