from vptable.lib.biff import Chunk, parse_biff, parse_untagged_biff

from .. import TestBase
from ..compound import code_record, font_record, i32, record, untagged


class TestTaggedParser(TestBase):

    def test_example_from_format_notes(self):
        data = i32(8) + B'NAMEabcd' + i32(4) + B'ABCD'
        self.assertEqual(parse_biff(data), [Chunk('NAME', B'abcd')])

    def test_one_chunk_per_record_with_payload(self):
        data = B''.join([
            record(B'WDTH', i32(0x40)),
            record(B'LOCK'),
            record(B'HGHT', i32(0x20)),
            record(B'DATA', B'\x89PNG'),
            record(B'ENDB'),
        ])
        chunks = parse_biff(data)
        self.assertEqual([c.tag for c in chunks], ['WDTH', 'HGHT', 'DATA'])
        self.assertEqual(chunks[2].data, B'\x89PNG')

    def test_records_without_payload(self):
        for size in range(5):
            data = i32(size) + B'ABCD'[:size] + record(B'NEXT', B'!')
            self.assertEqual(parse_biff(data), [Chunk('NEXT', B'!')], F'size {size}')

    def test_zero_padding_is_traversed(self):
        data = bytes(16) + record(B'NAME', B'pad')
        self.assertEqual(parse_biff(data), [Chunk('NAME', B'pad')])

    def test_truncated_record(self):
        data = record(B'NAME', B'one') + record(B'DATA', B'payload')
        for cut in range(len(record(B'NAME', B'one')) + 1, len(data)):
            self.assertEqual(parse_biff(data[:cut]), [Chunk('NAME', B'one')], F'cut at {cut}')

    def test_negative_size_stops(self):
        data = record(B'NAME', B'one') + i32(-20) + B'JUNKJUNKJUNK'
        self.assertEqual(parse_biff(data), [Chunk('NAME', B'one')])

    def test_start_offset(self):
        data = i32(2) + record(B'NAME', B'item')
        self.assertEqual(parse_biff(data, 4), [Chunk('NAME', B'item')])

    def test_code_record(self):
        script = B'Sub Table1_Init\r\nEnd Sub\r\n'
        data = record(B'SIMG', i32(1)) + code_record(script) + record(B'ENDB')
        chunks = parse_biff(data)
        self.assertEqual(len(chunks), 2)
        code = chunks[1]
        self.assertEqual(code.tag, 'CODE')
        self.assertEqual(code.data, script)
        self.assertEqual(code.block, B'CODE' + script)

    def test_short_code_record(self):
        for script in (B'x', B'End\n'):
            chunks = parse_biff(code_record(script) + record(B'ENDB'))
            self.assertEqual(chunks, [Chunk('CODE', script)])
        self.assertEqual(parse_biff(code_record(B'') + record(B'ENDB')), [])

    def test_truncated_code_record(self):
        data = record(B'SIMG', i32(1)) + code_record(B'x' * 100)
        self.assertEqual([c.tag for c in parse_biff(data[:-1])], ['SIMG'])

    def test_font_record_is_skipped(self):
        data = record(B'SFNT', i32(1)) + font_record(B'\0' * 300) + record(B'SCOL', i32(2))
        chunks = parse_biff(data)
        self.assertEqual([c.tag for c in chunks], ['SFNT', 'SCOL'])
        self.assertEqual(chunks[1].data, i32(2))

    def test_garbage_never_raises(self):
        for size in (0, 3, 5, 17, 100, 1000):
            data = self.generate_random_buffer(size)
            self.assertIsInstance(parse_biff(data), list)


class TestUntaggedParser(TestBase):

    def test_positional_records(self):
        data = untagged(B'bump', B'C:\\bump.wav', B'bump1', B'RIFF0000')
        self.assertEqual(parse_untagged_biff(data), [B'bump', B'C:\\bump.wav', B'bump1', B'RIFF0000'])

    def test_stops_after_empty_record(self):
        data = untagged(B'name', B'', B'id', B'data')
        self.assertEqual(parse_untagged_biff(data), [B'name', B''])

    def test_stops_at_incomplete_record(self):
        data = untagged(B'name', B'path') + i32(100) + B'short'
        self.assertEqual(parse_untagged_biff(data), [B'name', B'path'])

    def test_empty_buffer(self):
        self.assertEqual(parse_untagged_biff(B''), [])
