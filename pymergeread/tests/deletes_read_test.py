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

import os
import shutil
import tempfile
import unittest

from parameterized import parameterized

from pymergeread.common.exceptions import DataCorruption, InvalidDeleteFile, IOFailure
from pymergeread.common.file_io import FileIO
from pymergeread.common.options.options import Options
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.schema.data_types import AtomicType, required
from pymergeread.schema.table_schema import TableSchema
from pymergeread.snapshot.table_metadata import InMemoryTableMetadata
from pymergeread.table.file_store_table import FileStoreTable
from pymergeread.table.row.generic_row import GenericRow
from pymergeread.tests.file_helpers import PARTITION, FileHelpers

FORMATS = [("parquet",), ("orc",), ("avro",)]

RECORDS = [
    {"id": 29, "data": "a"},
    {"id": 43, "data": "b"},
    {"id": 61, "data": "c"},
    {"id": 89, "data": "d"},
    {"id": 100, "data": "e"},
    {"id": 121, "data": "f"},
    {"id": 122, "data": "g"},
]


class DeletesReadTest(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tempdir, ignore_errors=True)

    def _create_table(self, file_format: str, options=None):
        self.schema = TableSchema(0, [required(1, "id", "INT"), required(2, "data", "STRING")])
        self.metadata = InMemoryTableMetadata(self.schema)
        self.helpers = FileHelpers(os.path.join(self.tempdir, "data"), file_format)
        table_options = {"file.format": file_format}
        table_options.update(options or {})
        self.table = FileStoreTable(self.metadata, FileIO(self.tempdir, Options()), table_options)
        self.data_file = self.helpers.write_data_file(self.schema, RECORDS)
        self.metadata.new_append().append_file(self.data_file).commit()

    def _data_field(self):
        return self.metadata.schema().find_field_by_name("data")

    def _ids(self, snapshot_id=None, columns=None):
        ids = [row.get_field(0) for row in self.table.scan(snapshot_id, columns)]
        return ids

    @parameterized.expand(FORMATS)
    def test_read_without_deletes(self, file_format):
        self._create_table(file_format)
        self.assertEqual(self._ids(), [r["id"] for r in RECORDS])

    @parameterized.expand(FORMATS)
    def test_equality_deletes(self, file_format):
        self._create_table(file_format)
        deletes = self.helpers.write_equality_deletes(
            [self._data_field()], [{"data": "a"}, {"data": "d"}, {"data": "g"}])
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        self.assertEqual(set(self._ids()), {43, 61, 100, 121})

    @parameterized.expand(FORMATS)
    def test_position_deletes(self, file_format):
        self._create_table(file_format)
        path = self.data_file.file_path
        deletes = self.helpers.write_position_deletes([(path, 0), (path, 3), (path, 6)])
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        # survivors keep their original relative order
        self.assertEqual(self._ids(), [43, 61, 100, 121])

    @parameterized.expand(FORMATS)
    def test_mixed_position_and_equality_deletes(self, file_format):
        self._create_table(file_format)
        path = self.data_file.file_path
        eq_deletes = self.helpers.write_equality_deletes(
            [self._data_field()], [{"data": "a"}, {"data": "d"}, {"data": "g"}])
        pos_deletes = self.helpers.write_position_deletes([(path, 3), (path, 5)])
        self.metadata.new_row_delta().add_deletes(eq_deletes).add_deletes(pos_deletes).commit()

        self.assertEqual(set(self._ids()), {43, 61, 100})

    @parameterized.expand(FORMATS)
    def test_union_of_position_and_single_equality_delete(self, file_format):
        self._create_table(file_format)
        path = self.data_file.file_path
        eq_deletes = self.helpers.write_equality_deletes([self._data_field()], [{"data": "a"}])
        pos_deletes = self.helpers.write_position_deletes([(path, 3), (path, 5)])
        self.metadata.new_row_delta().add_deletes(eq_deletes).add_deletes(pos_deletes).commit()

        self.assertEqual(set(self._ids()), {43, 61, 100, 122})

    @parameterized.expand(FORMATS)
    def test_multiple_equality_delete_schemas(self, file_format):
        self._create_table(file_format)
        data_deletes = self.helpers.write_equality_deletes(
            [self._data_field()], [{"data": "a"}, {"data": "d"}, {"data": "g"}])
        id_deletes = self.helpers.write_equality_deletes(
            [self.schema.find_field(1)], [{"id": 121}, {"id": 29}])
        self.metadata.new_row_delta().add_deletes(data_deletes).add_deletes(id_deletes).commit()

        self.assertEqual(set(self._ids()), {43, 61, 100})

    @parameterized.expand(FORMATS)
    def test_equality_delete_by_null(self, file_format):
        self._create_table(file_format)
        schema = self.metadata.update_schema().make_column_optional("data").commit()
        null_file = self.helpers.write_data_file(schema, [{"id": 131, "data": None}])
        self.metadata.new_append().append_file(null_file).commit()
        self.assertEqual(len(self._ids()), 8)

        deletes = self.helpers.write_equality_deletes([schema.find_field_by_name("data")], [{"data": None}])
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        self.assertEqual(set(self._ids()), {r["id"] for r in RECORDS})

    @parameterized.expand(FORMATS)
    def test_projection_does_not_change_deleted_rows(self, file_format):
        self._create_table(file_format)
        path = self.data_file.file_path
        eq_deletes = self.helpers.write_equality_deletes(
            [self._data_field()], [{"data": "a"}, {"data": "d"}, {"data": "g"}])
        pos_deletes = self.helpers.write_position_deletes([(path, 3), (path, 5)])
        self.metadata.new_row_delta().add_deletes(eq_deletes).add_deletes(pos_deletes).commit()

        id_rows = [row.to_tuple() for row in self.table.scan(columns=["id"])]
        all_rows = [row.to_tuple() for row in self.table.scan(columns=["*"])]
        self.assertTrue(all(len(row) == 1 for row in id_rows))
        self.assertEqual({row[0] for row in id_rows}, {row[0] for row in all_rows})
        self.assertEqual(set(all_rows), {(43, "b"), (61, "c"), (100, "e")})

    @parameterized.expand(FORMATS)
    def test_scan_twice_is_idempotent(self, file_format):
        self._create_table(file_format)
        deletes = self.helpers.write_equality_deletes([self._data_field()], [{"data": "c"}])
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        self.assertEqual(self._ids(), self._ids())
        self.assertEqual(1, self.table.delete_index_cache.get_cache_size())

    @parameterized.expand(FORMATS)
    def test_read_added_column_and_null_delete(self, file_format):
        self._create_table(file_format)
        schema = self.metadata.update_schema().add_column("category", AtomicType("STRING")).commit()
        new_file = self.helpers.write_data_file(
            schema, [{"id": 200, "data": "x", "category": "c1"}, {"id": 201, "data": "y", "category": None}])
        self.metadata.new_append().append_file(new_file).commit()

        rows = {row.get_field(0): row.get_field(1) for row in self.table.scan(columns=["id", "category"])}
        self.assertEqual(rows[29], None)
        self.assertEqual(rows[200], "c1")

        # rows written before the column existed read it as NULL and match a NULL delete
        deletes = self.helpers.write_equality_deletes([schema.find_field_by_name("category")],
                                                      [{"category": None}])
        self.metadata.new_row_delta().add_deletes(deletes).commit()
        self.assertEqual(self._ids(), [200])

    @parameterized.expand(FORMATS)
    def test_snapshot_isolation(self, file_format):
        self._create_table(file_format)
        first_snapshot = self.metadata.current_snapshot().id
        deletes = self.helpers.write_equality_deletes([self._data_field()], [{"data": "b"}])
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        self.assertEqual(len(self._ids(snapshot_id=first_snapshot)), 7)
        self.assertEqual(len(self._ids()), 6)

    @parameterized.expand(FORMATS)
    def test_position_deletes_of_other_files_are_ignored(self, file_format):
        self._create_table(file_format)
        other = os.path.join(self.tempdir, "data", "other.parquet")
        deletes = self.helpers.write_position_deletes([(other, 0), (self.data_file.file_path, 1), (other, 100)])
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        self.assertEqual(self._ids(), [29, 61, 89, 100, 121, 122])

    @parameterized.expand(FORMATS)
    def test_position_delete_out_of_bounds(self, file_format):
        self._create_table(file_format)
        deletes = self.helpers.write_position_deletes([(self.data_file.file_path, 7)])
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        with self.assertRaises(InvalidDeleteFile) as ctx:
            self._ids()
        self.assertEqual(ctx.exception.file_path, self.data_file.file_path)

    @parameterized.expand(FORMATS)
    def test_position_delete_out_of_bounds_unchecked(self, file_format):
        self._create_table(file_format, {"scan.position-delete.check-bounds": "false"})
        path = self.data_file.file_path
        deletes = self.helpers.write_position_deletes([(path, 0), (path, 7)])
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        self.assertEqual(len(self._ids()), 6)

    @parameterized.expand(FORMATS)
    def test_missing_delete_file(self, file_format):
        self._create_table(file_format)
        missing = DeleteFileMeta.position_deletes(
            os.path.join(self.tempdir, "missing." + file_format), PARTITION, 1)
        self.metadata.new_row_delta().add_deletes(missing).commit()

        with self.assertRaises(IOFailure) as ctx:
            self._ids()
        self.assertEqual(ctx.exception.file_path, missing.file_path)

    @parameterized.expand(FORMATS)
    def test_equality_delete_file_without_declared_column_fails(self, file_format):
        self._create_table(file_format)
        written = self.helpers.write_equality_deletes([self.schema.find_field(1)], [{"id": 99}])
        deletes = DeleteFileMeta.equality_deletes(written.file_path, PARTITION, 1, (2,),
                                                  written.file_size, file_format)
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        with self.assertRaises(DataCorruption) as ctx:
            self._ids()
        self.assertEqual(ctx.exception.file_path, deletes.file_path)

    @parameterized.expand(FORMATS)
    def test_undecodable_data_value_fails_with_file_path(self, file_format):
        self._create_table(file_format)
        # same schema id, but "id" written as strings
        string_schema = TableSchema(0, [required(1, "id", "STRING"), required(2, "data", "STRING")])
        bad_file = self.helpers.write_data_file(string_schema, [{"id": "1", "data": "x"}, {"id": "y", "data": "z"}])
        self.metadata.new_append().append_file(bad_file).commit()

        with self.assertRaises(DataCorruption) as ctx:
            list(self.table.scan())
        self.assertEqual(ctx.exception.file_path, bad_file.file_path)

    @parameterized.expand(FORMATS)
    def test_deletes_of_other_partition_are_ignored(self, file_format):
        self._create_table(file_format)
        deletes = self.helpers.write_equality_deletes(
            [self._data_field()], [{"data": "a"}], partition=GenericRow.of(1))
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        self.assertEqual(len(self._ids()), 7)

    @parameterized.expand(FORMATS)
    def test_to_arrow_in_parallel(self, file_format):
        self._create_table(file_format, {"scan.parallelism": "3", "read.batch-size": "2"})
        second = self.helpers.write_data_file(self.schema, [{"id": 300, "data": "a"}, {"id": 301, "data": "z"}])
        self.metadata.new_append().append_file(second).commit()
        deletes = self.helpers.write_equality_deletes([self._data_field()], [{"data": "a"}])
        self.metadata.new_row_delta().add_deletes(deletes).commit()

        read_builder = self.table.new_read_builder().with_projection(["data", "id"])
        tasks = read_builder.new_scan().plan().tasks()
        table_read = read_builder.new_read()
        arrow_table = table_read.to_arrow(tasks)
        self.assertEqual(arrow_table.column_names, ["data", "id"])
        self.assertEqual(sorted(arrow_table.column("id").to_pylist()), [43, 61, 89, 100, 121, 122, 301])

        df = table_read.to_pandas(tasks)
        self.assertEqual(sorted(df["id"].tolist()), [43, 61, 89, 100, 121, 122, 301])

    @parameterized.expand(FORMATS)
    def test_partition_filter(self, file_format):
        self._create_table(file_format)
        other = self.helpers.write_data_file(self.schema, [{"id": 400, "data": "q"}], partition=GenericRow.of(1))
        self.metadata.new_append().append_file(other).commit()

        read_builder = self.table.new_read_builder().with_partition_filter(lambda p: p.get_field(0) == 1)
        rows = list(read_builder.new_read().to_iterator(read_builder.new_scan().plan().tasks()))
        self.assertEqual([row.get_field(0) for row in rows], [400])


if __name__ == '__main__':
    unittest.main()
