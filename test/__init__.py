import logging
import pathlib
import random
import tempfile
import unittest

import vptable

from .compound import build_table


__all__ = ['vptable', 'TestBase']


class TestBase(unittest.TestCase):

    def generate_random_buffer(self, size):
        return bytes(random.randrange(0, 0x100) for _ in range(size))

    def setUp(self):
        random.seed(0xBAADF00D)  # guarantee deterministic 'random' buffers
        logging.disable(logging.CRITICAL)

    def tearDown(self):
        logging.disable(logging.NOTSET)

    def temporary_directory(self) -> pathlib.Path:
        temp = tempfile.TemporaryDirectory(prefix='vptable.test-data.')
        self.addCleanup(temp.cleanup)
        return pathlib.Path(temp.name)

    def write_table(self, name: str = 'table.vpx', data: bytes = None, **kwargs) -> pathlib.Path:
        """
        Write a table file to a temporary directory and return its path. Unless the raw file
        contents are given, the keyword arguments are passed to `test.compound.build_table`.
        """
        if data is None:
            data = build_table(**kwargs)
        path = self.temporary_directory() / name
        path.write_bytes(data)
        return path
