#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Decoders for the BIFF-style record streams found inside table files. A tagged record has the
following layout:

    4 bytes     size of the record excluding the size field itself (little endian)
    4 bytes     ASCII tag
    n bytes     payload, where n is the record size minus 4

An untagged record omits the tag. Both decoders are best-effort: they never raise on malformed
data and instead stop at the first record that does not fit into the buffer, returning all
records that were decoded completely up to that point.
"""
from __future__ import annotations

from typing import Iterator, List, NamedTuple

from vptable.lib.environment import logger
from vptable.lib.structures import StructReader, buf

log = logger(__name__)


class Chunk(NamedTuple):
    tag: str
    data: bytes

    @property
    def block(self) -> bytes:
        """
        The tag followed by the payload; this is the portion of the record that follows the
        size field, except for `CODE` records where the inner size field is omitted.
        """
        return self.tag.encode('latin1') + self.data

    def __repr__(self):
        return F'<chunk:{self.tag}:{len(self.data)}>'


class _TaggedDecoder:
    """
    Iterates the records of a tagged stream. Each step yields either a `Chunk` or `None` for a
    record that was consumed but carries no payload; the iteration ends at the end of the buffer
    or at the first record that cannot be decoded completely.
    """

    def __init__(self, data: buf, offset: int = 0):
        self.reader = StructReader(data)
        self.offset = offset

    def _stop(self, reason: str):
        log.debug(F'stopped decoding at offset {self.reader.tell():#x}: {reason}')

    def __iter__(self) -> Iterator[Chunk | None]:
        reader = self.reader
        reader.seekset(self.offset)
        while reader.tell() < len(reader) - 4:
            size = reader.i32(peek=True)
            if size < 0:
                return self._stop(F'negative record size {size}')
            tag = bytes(reader.read(4 + min(size, 4), peek=True)[4:]).decode('latin1')
            if tag == 'FONT':
                # tag, then 8 unknown bytes, then a big endian 16-bit size and the font data
                if not reader.fits(2, 17):
                    return self._stop('truncated font record')
                with reader.detour(17, 1), reader.be:
                    font_size = reader.i16()
                if font_size < 0:
                    return self._stop(F'negative font size {font_size}')
                reader.seekrel(19 + font_size)
                yield None
            elif tag == 'CODE':
                # the code payload carries its own size field after the tag; every non-empty
                # script is kept, including scripts of at most four bytes
                if not reader.fits(4, 8):
                    return self._stop('truncated code size')
                with reader.detour(8, 1):
                    code_size = reader.i32()
                if code_size < 0 or not reader.fits(code_size, 12):
                    return self._stop(F'code of size {code_size} exceeds buffer')
                reader.seekrel(12)
                code = reader.read_bytes(code_size)
                yield Chunk(tag, code) if code_size > 0 else None
            else:
                if not reader.fits(size, 4):
                    return self._stop(F'record of size {size} exceeds buffer')
                reader.seekrel(4)
                block = reader.read_exactly(size)
                yield Chunk(tag, bytes(block[4:])) if size > 4 else None


def parse_biff(data: buf, offset: int = 0) -> List[Chunk]:
    """
    Decode a tagged record stream starting at the given offset. Records without payload are not
    part of the result; `FONT` records are skipped entirely.
    """
    return [chunk for chunk in _TaggedDecoder(data, offset) if chunk is not None]


def iter_untagged(data: buf, offset: int = 0) -> Iterator[bytes]:
    """
    Decode an untagged record stream. Decoding ends when the remaining buffer cannot hold the
    next record, or after a record of size zero.
    """
    reader = StructReader(data)
    reader.seekset(offset)
    while reader.tell() < len(reader) - 4:
        size = reader.i32()
        if size < 0 or not reader.fits(size):
            log.debug(F'stopped decoding untagged record at offset {reader.tell() - 4:#x}')
            return
        yield reader.read_bytes(size)
        if size == 0:
            return


def parse_untagged_biff(data: buf, offset: int = 0) -> List[bytes]:
    return list(iter_untagged(data, offset))
