from vptable.lib.ole import ContainerNotFound, MissingStorage
from vptable.lib.script import (
    CodeMarkerNotFound,
    get_table_info,
    locate_script,
    read_script_from_table,
)

from .. import TestBase
from ..compound import build_compound, game_data, record, table_info


class TestScriptLocator(TestBase):

    def test_locate_script(self):
        script = B'Option Explicit\r\nSub Table1_Init\r\nEnd Sub\r\n'
        data = game_data(script, textures=2)
        span = locate_script(data)
        self.assertEqual(span.body, script)
        self.assertEqual(span.code, script.decode('utf8'))
        self.assertTrue(span.tail.startswith(B'\x04\x00\x00\x00ENDB'))
        self.assertEqual(span.buffer, data)

    def test_empty_script(self):
        span = locate_script(game_data(B''))
        self.assertEqual(span.code, '')

    def test_missing_code_marker(self):
        data = record(B'SIMG', B'\0\0\0\0') + record(B'ENDB')
        with self.assertRaises(CodeMarkerNotFound):
            locate_script(data)

    def test_missing_end_marker(self):
        data = game_data(B'Dim x')
        data = data[:data.rfind(B'ENDB') - 4]
        with self.assertRaises(CodeMarkerNotFound):
            locate_script(data)

    def test_replace_script(self):
        data = game_data(B'Dim a', sounds=1)
        span = locate_script(data)
        changed = span.replace('Dim a, b, c')
        other = locate_script(changed)
        self.assertEqual(other.code, 'Dim a, b, c')
        self.assertEqual(other.tail, span.tail)
        self.assertEqual(other.head[:-4], span.head[:-4])
        self.assertEqual(changed, game_data(B'Dim a, b, c', sounds=1))

    def test_invalid_utf8_is_replaced(self):
        span = locate_script(game_data(B'Dim \xFF'))
        self.assertEqual(span.code, 'Dim \uFFFD')
        self.assertEqual(span.body, B'Dim \xFF')

    def test_read_script_from_table(self):
        script = B'\' Attack from Mars\r\nOption Explicit\r\n'
        path = self.write_table(script=script)
        first = read_script_from_table(path)
        again = read_script_from_table(str(path))
        self.assertEqual(first.body, script)
        self.assertEqual(first, again)

    def test_table_without_game_storage(self):
        path = self.write_table(data=build_compound({'TableInfo': table_info(TableName='X')}))
        with self.assertRaises(MissingStorage):
            read_script_from_table(path)

    def test_table_does_not_exist(self):
        with self.assertRaises(ContainerNotFound):
            read_script_from_table(self.temporary_directory() / 'nothing.vpx')


class TestTableInfo(TestBase):

    def test_all_fields(self):
        path = self.write_table(info=table_info(
            TableName='Medieval Madness',
            AuthorName='Tom Speaker',
            TableVersion='1.2',
            ReleaseDate='1997',
        ))
        info = get_table_info(path)
        self.assertEqual(info, {
            'table_name': 'Medieval Madness',
            'author_name': 'Tom Speaker',
            'table_version': '1.2',
            'release_date': '1997',
        })

    def test_missing_storage(self):
        path = self.write_table()
        self.assertEqual(get_table_info(path), {})

    def test_wide_text_is_stripped_of_zeros(self):
        path = self.write_table(info={'AuthorEmail': 'a@b.c'.encode('utf-16le') + B'\0\0'})
        self.assertEqual(get_table_info(path), {'author_email': 'a@b.c'})

    def test_unknown_streams_are_ignored(self):
        path = self.write_table(info={'Screenshot': B'\x89PNG' * 10, 'TableRules': 'none'.encode('utf-16le')})
        self.assertEqual(get_table_info(path), {'table_rules': 'none'})
