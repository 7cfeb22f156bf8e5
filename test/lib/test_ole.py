from vptable.lib.ole import (
    Container,
    ContainerNotFound,
    CorruptContainer,
    MissingStorage,
    MissingStream,
)

from .. import TestBase
from ..compound import build_compound


class TestContainer(TestBase):

    def test_storages_and_streams(self):
        big = self.generate_random_buffer(0x2345)
        path = self.write_table(data=build_compound({
            'GameStg': {'GameData': B'small stream', 'Image0': big},
            'TableInfo': {'TableName': 'Attack'.encode('utf-16le')},
        }))
        with Container(path) as container:
            self.assertEqual(sorted(container.storages()), ['GameStg', 'TableInfo'])
            game = container.storage('GameStg')
            self.assertIsNotNone(game)
            self.assertEqual(sorted(game.streams()), ['GameData', 'Image0'])
            self.assertEqual(game.read_stream('GameData'), B'small stream')
            self.assertEqual(game.read_stream('Image0'), big)
            self.assertIn('Image0', game)
            self.assertNotIn('Image1', game)

    def test_missing_storage(self):
        path = self.write_table(data=build_compound({'GameStg': {'GameData': B'x' * 10}}))
        with Container(path) as container:
            self.assertIsNone(container.storage('TableInfo'))
            with self.assertRaises(MissingStorage):
                container.require('TableInfo')

    def test_missing_stream(self):
        path = self.write_table(data=build_compound({'GameStg': {'GameData': B'x' * 10}}))
        with Container(path) as container:
            with self.assertRaises(MissingStream) as context:
                container.require('GameStg').read_stream('Sound0')
            self.assertEqual(context.exception.name, 'Sound0')
            self.assertIsInstance(context.exception, LookupError)

    def test_stream_is_not_a_storage(self):
        path = self.write_table(data=build_compound({'GameStg': {'GameData': B'x' * 10}}))
        with Container(path) as container:
            self.assertIsNone(container.storage('GameStg/GameData'))

    def test_file_not_found(self):
        path = self.temporary_directory() / 'missing.vpx'
        with self.assertRaises(ContainerNotFound):
            Container(path)
        with self.assertRaises(FileNotFoundError):
            Container(str(path))

    def test_not_a_compound_file(self):
        path = self.write_table(data=self.generate_random_buffer(0x1000))
        with self.assertRaises(CorruptContainer):
            Container(path)

    def test_garbage_after_signature(self):
        signature = B'\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1'
        for _ in range(8):
            path = self.write_table(data=signature + self.generate_random_buffer(0x1000 - len(signature)))
            with self.assertRaises(CorruptContainer):
                Container(path)
