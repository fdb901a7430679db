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

from pymergeread.common.exceptions import DataCorruption, IOFailure
from pymergeread.common.file_io import FileIO
from pymergeread.common.options.options import Options
from pymergeread.read.reader.data_file_batch_reader import DataFileBatchReader
from pymergeread.read.row_source import FileRowSource
from pymergeread.schema.data_types import optional, required
from pymergeread.schema.schema_resolver import SchemaResolver
from pymergeread.schema.table_schema import TableSchema
from pymergeread.tests.file_helpers import FileHelpers


class FileRowSourceTest(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.file_io = FileIO(self.tempdir, Options())
        self.row_source = FileRowSource(self.file_io, batch_size=2)

    def tearDown(self):
        shutil.rmtree(self.tempdir, ignore_errors=True)

    def test_missing_file(self):
        path = os.path.join(self.tempdir, "missing.parquet")
        with self.assertRaises(IOFailure) as ctx:
            self.row_source.open(path, "parquet", ["id"])
        self.assertEqual(ctx.exception.file_path, path)
        self.assertIsInstance(ctx.exception, IOError)

    def test_undecodable_file(self):
        path = os.path.join(self.tempdir, "broken.parquet")
        with open(path, 'wb') as f:
            f.write(b"not a parquet file")
        with self.assertRaises(DataCorruption) as ctx:
            reader = self.row_source.open(path, "parquet", ["id"])
            reader.read_arrow_batch()
        self.assertEqual(ctx.exception.file_path, path)

    def test_read_renamed_and_added_columns_by_field_id(self):
        old_schema = TableSchema(0, [required(1, "id", "INT"), required(2, "name", "STRING")])
        data_file = FileHelpers(self.tempdir).write_data_file(
            old_schema, [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}, {"id": 3, "name": "c"}])
        # field 2 renamed, field 3 added
        read_fields = [optional(2, "data", "STRING"), required(1, "id", "BIGINT"), optional(3, "extra", "INT")]

        physical_names = SchemaResolver(old_schema.fields).physical_names(read_fields)
        self.assertEqual(physical_names, ["name", "id", None])
        names_to_read = [name for name in physical_names if name is not None]
        reader = DataFileBatchReader(self.row_source.open(data_file.file_path, "parquet", names_to_read),
                                     physical_names, read_fields)
        batches = list(iter(reader.read_arrow_batch, None))
        reader.close()

        self.assertEqual([b.num_rows for b in batches], [2, 1])
        self.assertEqual(batches[0].schema.names, ["data", "id", "extra"])
        self.assertEqual(batches[0].column(0).to_pylist(), ["a", "b"])
        self.assertEqual(batches[1].column(1).to_pylist(), [3])
        self.assertEqual(batches[1].column(2).to_pylist(), [None])
        self.assertEqual(str(batches[0].schema.field("id").type), "int64")


if __name__ == '__main__':
    unittest.main()
