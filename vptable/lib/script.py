#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Fast access to the table script and the human readable table information. The script is located
by searching the raw `GameData` stream for the records that enclose it, which is considerably
faster than decoding the whole stream and, unlike the record decoder, keeps every byte around
the script intact.
"""
from __future__ import annotations

import os
import time

from typing import Dict, NamedTuple

from vptable.lib.environment import logger
from vptable.lib.ole import Container, CorruptStream, MissingStream

log = logger(__name__)

CODE_MARKER = B'\x04\x00\x00\x00CODE'
ENDB_MARKER = B'\x04\x00\x00\x00ENDB'

TABLE_INFO_STREAMS = {
    'TableName'        : 'table_name',
    'AuthorName'       : 'author_name',
    'TableBlurp'       : 'table_blurp',
    'TableRules'       : 'table_rules',
    'AuthorEmail'      : 'author_email',
    'ReleaseDate'      : 'release_date',
    'TableVersion'     : 'table_version',
    'AuthorWebSite'    : 'author_website',
    'TableDescription' : 'table_description',
}


class CodeMarkerNotFound(LookupError):
    def __init__(self, path: str):
        super().__init__(F'Cannot find CODE part in BIFF structure of "{path}".')
        self.path = path


class ScriptSpan(NamedTuple):
    """
    The script of a table together with the verbatim bytes of the `GameData` stream that
    precede and follow it. The head ends with the 4-byte size field of the script.
    """
    head: bytes
    body: bytes
    tail: bytes

    @property
    def code(self) -> str:
        return self.body.decode('utf8', errors='replace')

    @property
    def buffer(self) -> bytes:
        return self.head + self.body + self.tail

    def replace(self, code: str) -> bytes:
        """
        Return a `GameData` stream in which the script has been replaced by the given code.
        Apart from the script and its size field, the stream is unchanged.
        """
        data = code.encode('utf8')
        return self.head[:-4] + len(data).to_bytes(4, 'little') + data + self.tail


def locate_script(data: bytes, path: str = '<buffer>') -> ScriptSpan:
    """
    Split a `GameData` stream into the script and the bytes around it.
    """
    start = data.find(CODE_MARKER)
    if start < 0:
        raise CodeMarkerNotFound(path)
    start += len(CODE_MARKER) + 4
    end = data.find(ENDB_MARKER, start)
    if end < 0:
        raise CodeMarkerNotFound(path)
    return ScriptSpan(data[:start], data[start:end], data[end:])


def read_script_from_table(path: str | os.PathLike) -> ScriptSpan:
    """
    Extract the table script from the given table file.
    """
    now = time.monotonic()
    path = os.fspath(path)
    with Container(path) as container:
        data = container.require('GameStg').read_stream('GameData')
    span = locate_script(data, path)
    log.info(F'found GameData for "{path}" in {(time.monotonic() - now) * 1000:.0f} ms')
    return span


def get_table_info(path: str | os.PathLike) -> Dict[str, str]:
    """
    Read all available fields from the `TableInfo` storage of the given table file. Missing
    fields are skipped, and a missing storage yields an empty dictionary.
    """
    path = os.fspath(path)
    props: Dict[str, str] = {}
    with Container(path) as container:
        storage = container.storage('TableInfo')
        if storage is None:
            log.warning(F'storage "TableInfo" not found in "{path}"')
            return props
        for stream, key in TABLE_INFO_STREAMS.items():
            try:
                data = storage.read_stream(stream)
            except (MissingStream, CorruptStream) as error:
                log.warning(str(error))
                continue
            props[key] = data.decode('utf8', errors='replace').replace('\0', '')
    return props
