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
import threading
import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from pymergeread.manifest.schema.data_file_meta import DataFileMeta
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.schema.table_schema import TableSchema
from pymergeread.snapshot.snapshot import Snapshot

logger = logging.getLogger(__name__)


class TableMetadata(ABC):
    """
    The table's snapshot log and schemas. Scans never read ambient state: the snapshot to read
    and the schema to read it with are always taken from here.
    """

    @abstractmethod
    def current_snapshot(self) -> Optional[Snapshot]:
        """Returns the latest committed snapshot, or None for an empty table."""

    @abstractmethod
    def snapshot(self, snapshot_id: int) -> Snapshot:
        """Returns the snapshot with the given id."""

    @abstractmethod
    def schema(self) -> TableSchema:
        """Returns the current table schema."""

    @abstractmethod
    def schema_by_id(self, schema_id: int) -> TableSchema:
        """Returns the schema a file was written with."""

    @property
    def partition_keys(self) -> List[str]:
        return self.schema().partition_keys


class InMemoryTableMetadata(TableMetadata):
    """
    Table metadata held in memory. Every commit produces a new snapshot with the next sequence
    number; a commit either fully applies or leaves the metadata untouched.
    """

    def __init__(self, schema: TableSchema):
        self._lock = threading.Lock()
        self._schemas: Dict[int, TableSchema] = {schema.id: schema}
        self._current_schema_id = schema.id
        self._snapshots: Dict[int, Snapshot] = {}
        self._current_snapshot_id: Optional[int] = None

    def current_snapshot(self) -> Optional[Snapshot]:
        with self._lock:
            if self._current_snapshot_id is None:
                return None
            return self._snapshots[self._current_snapshot_id]

    def snapshot(self, snapshot_id: int) -> Snapshot:
        with self._lock:
            snapshot = self._snapshots.get(snapshot_id)
        if snapshot is None:
            raise ValueError(f"Snapshot {snapshot_id} does not exist")
        return snapshot

    def snapshots(self) -> List[Snapshot]:
        with self._lock:
            return [self._snapshots[i] for i in sorted(self._snapshots)]

    def schema(self) -> TableSchema:
        with self._lock:
            return self._schemas[self._current_schema_id]

    def schema_by_id(self, schema_id: int) -> TableSchema:
        with self._lock:
            schema = self._schemas.get(schema_id)
        if schema is None:
            raise ValueError(f"Schema {schema_id} does not exist")
        return schema

    def new_append(self) -> 'RowDelta':
        from pymergeread.snapshot.row_delta import RowDelta

        return RowDelta(self, commit_kind="APPEND")

    def new_row_delta(self) -> 'RowDelta':
        from pymergeread.snapshot.row_delta import RowDelta

        return RowDelta(self, commit_kind="ROW_DELTA")

    def update_schema(self) -> 'SchemaUpdate':
        from pymergeread.snapshot.row_delta import SchemaUpdate

        return SchemaUpdate(self)

    def commit_files(self, commit_kind: str, data_files: Sequence[DataFileMeta],
                     delete_files: Sequence[DeleteFileMeta]) -> Snapshot:
        with self._lock:
            parent = self._snapshots.get(self._current_snapshot_id) if self._current_snapshot_id else None
            snapshot_id = (parent.id if parent else 0) + 1
            sequence_number = (parent.sequence_number if parent else 0) + 1
            schema = self._schemas[self._current_schema_id]
            for data_file in data_files:
                if data_file.schema_id not in self._schemas:
                    raise ValueError(f"Data file {data_file.file_path} refers to unknown schema {data_file.schema_id}")
            for delete_file in delete_files:
                for field_id in delete_file.equality_field_ids:
                    if schema.find_field(field_id) is None:
                        raise ValueError(
                            f"Delete file {delete_file.file_path} refers to unknown field id {field_id}")
            added_data = tuple(f.with_sequence_number(sequence_number, snapshot_id) for f in data_files)
            added_deletes = tuple(f.with_sequence_number(sequence_number, snapshot_id) for f in delete_files)
            snapshot = Snapshot(
                id=snapshot_id,
                sequence_number=sequence_number,
                schema_id=self._current_schema_id,
                commit_kind=commit_kind,
                time_millis=int(time.time() * 1000),
                parent_id=parent.id if parent else None,
                data_files=(parent.data_files if parent else ()) + added_data,
                delete_files=(parent.delete_files if parent else ()) + added_deletes,
            )
            self._snapshots[snapshot_id] = snapshot
            self._current_snapshot_id = snapshot_id
        logger.info("Committed snapshot %d (%s): %d data files and %d delete files added",
                    snapshot_id, commit_kind, len(added_data), len(added_deletes))
        return snapshot

    def commit_schema(self, schema: TableSchema) -> TableSchema:
        with self._lock:
            current = self._schemas[self._current_schema_id]
            if schema.id != current.id + 1:
                raise ValueError(f"Schema {schema.id} does not follow current schema {current.id}")
            self._schemas[schema.id] = schema
            self._current_schema_id = schema.id
        logger.info("Committed schema %d", schema.id)
        return schema
