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

from pyarrow.fs import LocalFileSystem

from pymergeread.common.exceptions import IOFailure
from pymergeread.common.file_io import FileIO
from pymergeread.common.options.options import Options


class FileIOTest(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.file_io = FileIO(self.tempdir, Options())

    def tearDown(self):
        shutil.rmtree(self.tempdir, ignore_errors=True)

    def test_local_filesystem(self):
        self.assertIsInstance(self.file_io.filesystem, LocalFileSystem)
        self.assertIsInstance(FileIO("file:///tmp/warehouse", Options()).filesystem, LocalFileSystem)

    def test_to_filesystem_path(self):
        self.assertEqual(self.file_io.to_filesystem_path("/tmp/a/b.parquet"), "/tmp/a/b.parquet")
        self.assertEqual(self.file_io.to_filesystem_path("file:///tmp//a/b.parquet"), "/tmp/a/b.parquet")
        self.assertEqual(self.file_io.to_filesystem_path("s3://bucket/a/b.parquet"), "bucket/a/b.parquet")

    def test_unknown_scheme(self):
        with self.assertRaises(ValueError):
            FileIO("hdfs://namenode/warehouse", Options())

    def test_exists_and_size(self):
        path = os.path.join(self.tempdir, "f.bin")
        with open(path, 'wb') as f:
            f.write(b"12345")
        self.assertTrue(self.file_io.exists(path))
        self.assertEqual(self.file_io.get_file_size(path), 5)
        with self.file_io.new_input_stream(path) as stream:
            self.assertEqual(stream.read(), b"12345")

    def test_missing_file(self):
        path = os.path.join(self.tempdir, "missing.bin")
        self.assertFalse(self.file_io.exists(path))
        with self.assertRaises(IOFailure):
            self.file_io.check_exists(path)
        with self.assertRaises(IOFailure):
            self.file_io.new_input_stream(path)


if __name__ == '__main__':
    unittest.main()
