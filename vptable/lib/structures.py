"""
Interfaces and classes to read structured data from in-memory buffers. All stream contents of a
table file are buffered completely before they are parsed, so the readers in this module work on
byte sequences with random access rather than on file objects.
"""
from __future__ import annotations

import contextlib
import io

from typing import Union

buf = Union[bytes, bytearray, memoryview]


class EOF(EOFError):
    """
    While reading from a `vptable.lib.structures.StructReader`, less bytes were available than
    requested. The exception contains the data from the incomplete read.
    """
    def __init__(self, size: int, rest: buf = B''):
        super().__init__(F'Unexpected end of buffer; attempted to read {size} bytes, but got only {len(rest)}.')
        self.rest = rest
        self.size = size

    def __bytes__(self):
        return bytes(self.rest)


class StreamDetour:
    """
    A stream detour is used as a context manager to temporarily read from a different location
    in the stream and then return to the original offset when the context ends.
    """
    def __init__(self, stream: StructReader, offset: int | None = None, whence: int = io.SEEK_SET):
        self.stream = stream
        self.offset = offset
        self.whence = whence

    def __enter__(self):
        self.cursor = self.stream.tell()
        if self.offset is not None:
            self.stream.seek(self.offset, self.whence)
        return self

    def __exit__(self, *args):
        self.stream.seek(self.cursor, io.SEEK_SET)


class StructReader:
    """
    A cursor over a byte buffer with methods to read integers of fixed size and byte order.
    Slices returned by the reader are `memoryview` objects into the original buffer; no data
    is copied until the caller converts them.
    """
    __slots__ = '_data', '_cursor', 'bigendian'

    def __init__(self, data: buf, bigendian: bool = False):
        self._data = memoryview(data)
        self._cursor = 0
        self.bigendian = bigendian

    def __len__(self):
        return len(self._data)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False

    @property
    @contextlib.contextmanager
    def be(self):
        self.bigendian = True
        try:
            yield self
        finally:
            self.bigendian = False

    @property
    def byteorder_name(self):
        return 'big' if self.bigendian else 'little'

    @property
    def eof(self) -> bool:
        return self._cursor >= len(self._data)

    @property
    def remaining_bytes(self) -> int:
        return max(0, len(self._data) - self._cursor)

    def fits(self, size: int, offset: int = 0) -> bool:
        """
        Check whether `size` bytes can be read starting `offset` bytes past the cursor.
        """
        return size >= 0 and offset >= 0 and self._cursor + offset + size <= len(self._data)

    def tell(self) -> int:
        return self._cursor

    def seek(self, offset: int, whence=io.SEEK_SET) -> int:
        if whence == io.SEEK_CUR:
            offset += self._cursor
        elif whence == io.SEEK_END:
            offset += len(self._data)
        elif whence != io.SEEK_SET:
            raise ValueError(F'Invalid whence value: {whence!r}')
        if offset < 0:
            raise ValueError('no negative offsets allowed')
        self._cursor = offset
        return offset

    def seekset(self, offset: int) -> int:
        return self.seek(offset, io.SEEK_SET)

    def seekrel(self, offset: int) -> int:
        return self.seek(offset, io.SEEK_CUR)

    def detour(self, offset: int | None = None, whence: int = io.SEEK_SET):
        return StreamDetour(self, offset, whence=whence)

    def read(self, size: int | None = None, peek: bool = False) -> memoryview:
        beginning = self._cursor
        if size is None or size < 0:
            end = len(self._data)
        else:
            end = min(self._cursor + size, len(self._data))
        result = self._data[beginning:end]
        if not peek:
            self._cursor = end
        return result

    def read_exactly(self, size: int, peek: bool = False) -> memoryview:
        """
        Read exactly `size` bytes. Raises `vptable.lib.structures.EOF` when fewer data is available.
        """
        data = self.read(size, peek)
        if len(data) < size:
            raise EOF(size, data)
        return data

    def read_bytes(self, size: int, peek: bool = False) -> bytes:
        return bytes(self.read_exactly(size, peek))

    def read_integer(self, size: int, peek: bool = False, signed: bool = False) -> int:
        """
        Read an integer of the given size (in bits) from the stream.
        """
        nbytes, rest = divmod(size, 8)
        if rest > 0:
            raise ValueError(
                F'A {self.__class__.__name__} cannot read {size} bit{"s" * (size > 1)}, only multiples of 8 are possible.')
        data = self.read_exactly(nbytes, peek)
        return int.from_bytes(data, self.byteorder_name, signed=signed)

    def u8(self, peek: bool = False) -> int:
        return self.read_integer(8, peek)

    def u16(self, peek: bool = False) -> int:
        return self.read_integer(16, peek)

    def u32(self, peek: bool = False) -> int:
        return self.read_integer(32, peek)

    def i16(self, peek: bool = False) -> int:
        return self.read_integer(16, peek, signed=True)

    def i32(self, peek: bool = False) -> int:
        return self.read_integer(32, peek, signed=True)


def le32(data: buf, offset: int = 0, signed: bool = True) -> int:
    """
    Decode the little endian 32-bit integer at the given offset of `data`.
    """
    view = memoryview(data)[offset:offset + 4]
    if len(view) < 4:
        raise EOF(4, view)
    return int.from_bytes(view, 'little', signed=signed)
