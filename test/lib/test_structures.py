from vptable.lib.structures import EOF, StructReader, le32

from .. import TestBase


class TestStructures(TestBase):

    def test_integers(self):
        reader = StructReader(B'\x01\x02\x03\x04\xFF\xFF\xFF\xFF\x00\x10')
        self.assertEqual(reader.u32(peek=True), 0x04030201)
        self.assertEqual(reader.tell(), 0)
        self.assertEqual(reader.u32(), 0x04030201)
        self.assertEqual(reader.i32(), -1)
        with reader.be:
            self.assertEqual(reader.i16(), 0x10)
        self.assertFalse(reader.bigendian)
        self.assertTrue(reader.eof)

    def test_read_exactly_raises_with_rest(self):
        reader = StructReader(B'abc')
        with self.assertRaises(EOF) as context:
            reader.read_exactly(5)
        self.assertEqual(bytes(context.exception), B'abc')

    def test_fits(self):
        reader = StructReader(bytes(10))
        reader.seekset(4)
        self.assertTrue(reader.fits(6))
        self.assertFalse(reader.fits(7))
        self.assertTrue(reader.fits(2, 4))
        self.assertFalse(reader.fits(2, 5))
        self.assertFalse(reader.fits(-1))
        self.assertEqual(reader.remaining_bytes, 6)

    def test_detour(self):
        reader = StructReader(B'0123456789')
        reader.seekrel(2)
        with reader.detour(7):
            self.assertEqual(reader.read_bytes(3), B'789')
        self.assertEqual(reader.read_bytes(2), B'23')

    def test_negative_seek(self):
        reader = StructReader(B'data')
        with self.assertRaises(ValueError):
            reader.seekrel(-1)

    def test_le32(self):
        self.assertEqual(le32(B'\xAA\x08\x00\x00\x00', 1), 8)
        self.assertEqual(le32(B'\xFE\xFF\xFF\xFF'), -2)
        self.assertEqual(le32(B'\xFE\xFF\xFF\xFF', signed=False), 0xFFFFFFFE)
        with self.assertRaises(EOF):
            le32(B'\x01\x02\x03')
