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

import unittest

import pyarrow as pa

from pymergeread.manifest.schema.data_file_meta import DataFileMeta
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.schema.data_types import AtomicType, required
from pymergeread.schema.table_schema import TableSchema
from pymergeread.snapshot.table_metadata import InMemoryTableMetadata
from pymergeread.table.row.generic_row import GenericRow


class InMemoryTableMetadataTest(unittest.TestCase):

    def setUp(self):
        self.schema = TableSchema(0, [required(1, "id", "INT"), required(2, "data", "STRING")])
        self.metadata = InMemoryTableMetadata(self.schema)
        self.data_file = DataFileMeta.create("d0.parquet", GenericRow.of(0), 3)

    def test_commits_assign_sequence_numbers(self):
        first = self.metadata.new_append().append_file(self.data_file).commit()
        deletes = DeleteFileMeta.equality_deletes("e0.parquet", GenericRow.of(0), 1, (2,))
        second = self.metadata.new_row_delta().add_deletes(deletes).commit()

        self.assertEqual((first.id, first.sequence_number), (1, 1))
        self.assertEqual((second.id, second.sequence_number, second.parent_id), (2, 2, 1))
        self.assertEqual(second.data_files[0].sequence_number, 1)
        self.assertEqual(second.delete_files[0].sequence_number, 2)
        self.assertEqual(second.total_record_count, 3)
        self.assertEqual(self.metadata.current_snapshot(), second)
        self.assertEqual(self.metadata.snapshot(1), first)
        self.assertEqual([s.id for s in self.metadata.snapshots()], [1, 2])

    def test_failed_commit_leaves_metadata_untouched(self):
        self.metadata.new_append().append_file(self.data_file).commit()
        bad_deletes = DeleteFileMeta.equality_deletes("e0.parquet", GenericRow.of(0), 1, (9,))
        row_delta = self.metadata.new_row_delta().add_rows(
            DataFileMeta.create("d1.parquet", GenericRow.of(0), 1)).add_deletes(bad_deletes)

        with self.assertRaises(ValueError):
            row_delta.commit()
        snapshot = self.metadata.current_snapshot()
        self.assertEqual(snapshot.id, 1)
        self.assertEqual(len(snapshot.data_files), 1)
        self.assertEqual(snapshot.delete_files, ())

    def test_row_delta_commits_once(self):
        row_delta = self.metadata.new_append().append_file(self.data_file)
        row_delta.commit()
        with self.assertRaises(RuntimeError):
            row_delta.commit()

    def test_schema_update(self):
        schema = self.metadata.update_schema().make_column_optional("data").add_column(
            "category", AtomicType("STRING")).commit()

        self.assertEqual(schema.id, 1)
        self.assertTrue(schema.find_field(2).nullable)
        self.assertEqual(schema.find_field_by_name("category").id, 3)
        self.assertEqual(self.metadata.schema(), schema)
        self.assertFalse(self.metadata.schema_by_id(0).find_field(2).nullable)

        snapshot = self.metadata.new_append().append_file(self.data_file).commit()
        self.assertEqual(snapshot.schema_id, 1)

    def test_schema_projection(self):
        self.assertEqual([f.name for f in self.schema.project(["data", "id"])], ["data", "id"])
        self.assertEqual(self.schema.project(["*"]), self.schema.fields)
        self.assertEqual(self.schema.project(None), self.schema.fields)
        with self.assertRaises(ValueError):
            self.schema.project(["missing"])

    def test_schema_from_pyarrow(self):
        schema = TableSchema.from_pyarrow_schema(pa.schema([
            pa.field("id", pa.int32(), nullable=False),
            ("data", pa.string()),
        ]))
        self.assertEqual(schema.field_ids, [1, 2])
        self.assertFalse(schema.find_field(1).nullable)
        self.assertEqual(schema.to_arrow_schema().field("data").metadata, {b"field_id": b"2"})
        self.assertEqual(TableSchema.from_pyarrow_schema(schema.to_arrow_schema()).fields, schema.fields)

    def test_invalid_delete_file_meta(self):
        with self.assertRaises(ValueError):
            DeleteFileMeta.equality_deletes("e0.parquet", GenericRow.of(0), 1, ())


if __name__ == '__main__':
    unittest.main()
