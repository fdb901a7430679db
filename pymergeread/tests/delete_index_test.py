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

import shutil
import tempfile
import unittest

from parameterized import parameterized

from pymergeread.common.exceptions import DataCorruption, SchemaMismatch
from pymergeread.common.file_io import FileIO
from pymergeread.common.options.options import Options
from pymergeread.deletes.bitmap_deletion_vector import BitmapDeletionVector
from pymergeread.deletes.delete_index_loader import DeleteIndexLoader
from pymergeread.manifest.schema.delete_file_meta import DeleteFileMeta
from pymergeread.manifest.schema.file_content import FileContent
from pymergeread.read.row_source import FileRowSource
from pymergeread.schema.data_types import optional, required
from pymergeread.schema.table_schema import TableSchema
from pymergeread.tests.file_helpers import PARTITION, FileHelpers


class DeleteIndexLoaderTest(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.schema = TableSchema(0, [required(1, "id", "INT"), optional(2, "data", "STRING")])
        self.loader = DeleteIndexLoader(FileRowSource(FileIO(self.tempdir, Options()), batch_size=3))

    def tearDown(self):
        shutil.rmtree(self.tempdir, ignore_errors=True)

    @parameterized.expand([("parquet",), ("orc",), ("avro",)])
    def test_position_deletes_grouped_by_path(self, file_format):
        helpers = FileHelpers(self.tempdir, file_format)
        delete_file = helpers.write_position_deletes(
            [("a.parquet", 5), ("b.parquet", 1), ("a.parquet", 2), ("a.parquet", 5), ("b.parquet", 0)])

        index = self.loader.load(delete_file, self.schema)

        self.assertEqual(index.content, FileContent.POSITION_DELETES)
        self.assertEqual(set(index.position_vectors), {"a.parquet", "b.parquet"})
        self.assertEqual(list(index.position_vector("a.parquet").bit_map()), [2, 5])
        self.assertEqual(index.position_vector("b.parquet"), BitmapDeletionVector.of([0, 1]))
        self.assertIsNone(index.position_vector("c.parquet"))
        self.assertEqual(index.cardinality(), 4)

    def test_null_position_is_corruption(self):
        helpers = FileHelpers(self.tempdir)
        delete_file = helpers.write_position_deletes([("a.parquet", 1), ("a.parquet", None)], nullable=True)

        with self.assertRaises(DataCorruption) as ctx:
            self.loader.load(delete_file, self.schema)
        self.assertEqual(ctx.exception.file_path, delete_file.file_path)

    def test_negative_position_is_corruption(self):
        helpers = FileHelpers(self.tempdir)
        delete_file = helpers.write_position_deletes([("a.parquet", -1)])

        with self.assertRaises(DataCorruption):
            self.loader.load(delete_file, self.schema)

    def test_missing_pos_column_is_corruption(self):
        helpers = FileHelpers(self.tempdir)
        # a file that looks like an equality delete file, declared as position deletes
        eq_file = helpers.write_equality_deletes([self.schema.find_field(1)], [{"id": 1}])
        delete_file = DeleteFileMeta.position_deletes(eq_file.file_path, PARTITION, 1)

        with self.assertRaises(DataCorruption):
            self.loader.load(delete_file, self.schema)

    @parameterized.expand([("parquet",), ("orc",), ("avro",)])
    def test_position_beyond_supported_row_count_is_corruption(self, file_format):
        helpers = FileHelpers(self.tempdir, file_format)
        delete_file = helpers.write_position_deletes([("a.parquet", 0), ("a.parquet", 2 ** 33)])

        with self.assertRaises(DataCorruption) as ctx:
            self.loader.load(delete_file, self.schema)
        self.assertEqual(ctx.exception.file_path, delete_file.file_path)

    @parameterized.expand([("parquet",), ("orc",), ("avro",)])
    def test_equality_column_missing_from_file_is_corruption(self, file_format):
        helpers = FileHelpers(self.tempdir, file_format)
        # declared on "data" but only "id" is written
        written = helpers.write_equality_deletes([self.schema.find_field(1)], [{"id": 99}])
        delete_file = DeleteFileMeta.equality_deletes(written.file_path, PARTITION, 1, (2,),
                                                      written.file_size, file_format)

        with self.assertRaises(DataCorruption) as ctx:
            self.loader.load(delete_file, self.schema)
        self.assertEqual(ctx.exception.file_path, delete_file.file_path)

    @parameterized.expand([("parquet",), ("orc",), ("avro",)])
    def test_equality_deletes(self, file_format):
        helpers = FileHelpers(self.tempdir, file_format)
        delete_file = helpers.write_equality_deletes(
            [self.schema.find_field(2)], [{"data": "a"}, {"data": None}, {"data": "a"}, {"data": "b"}])

        index = self.loader.load(delete_file, self.schema)

        self.assertEqual(index.content, FileContent.EQUALITY_DELETES)
        self.assertEqual(index.equality_field_ids, (2,))
        self.assertEqual(len(index.equality_keys), 3)
        self.assertIn(("a",), index.equality_keys)
        self.assertIn((None,), index.equality_keys)
        self.assertNotIn(("c",), index.equality_keys)

    def test_equality_deletes_resolved_by_field_id(self):
        helpers = FileHelpers(self.tempdir)
        delete_file = helpers.write_equality_deletes(
            [self.schema.find_field(2), self.schema.find_field(1)], [{"data": "a", "id": 1}])

        index = self.loader.load(delete_file, self.schema)

        self.assertEqual(index.equality_field_ids, (2, 1))
        self.assertIn(("a", 1), index.equality_keys)

    def test_unknown_equality_field_id(self):
        helpers = FileHelpers(self.tempdir)
        delete_file = helpers.write_equality_deletes([optional(9, "gone", "STRING")], [{"gone": "x"}])

        with self.assertRaises(SchemaMismatch) as ctx:
            self.loader.load(delete_file, self.schema)
        self.assertEqual(ctx.exception.field_id, 9)


class BitmapDeletionVectorTest(unittest.TestCase):

    def test_out_of_order_and_duplicates(self):
        vector = BitmapDeletionVector()
        for pos in [9, 3, 3, 0, 9]:
            vector.delete(pos)
        self.assertEqual(list(vector.bit_map()), [0, 3, 9])
        self.assertEqual(vector.get_cardinality(), 3)
        self.assertEqual(vector.max(), 9)

    def test_merge(self):
        vector = BitmapDeletionVector.of([1, 2])
        vector.merge(BitmapDeletionVector.of([2, 7]))
        self.assertEqual(list(vector.bit_map()), [1, 2, 7])
        self.assertTrue(vector.is_deleted(7))
        self.assertFalse(vector.is_deleted(3))

    def test_negative_position(self):
        with self.assertRaises(ValueError):
            BitmapDeletionVector().delete(-1)


if __name__ == '__main__':
    unittest.main()
