"""
This module provides JSON encoding and decoding for block metadata and extracted table
information. All modules should use this interface rather than the standard library JSON module;
the backend is orJSON, which serializes dataclasses and enumerations natively.
"""
from __future__ import annotations

import orjson


def standard_conversions(o):
    """
    Converts byte strings to hexadecimal strings, and `set`, `tuple` and `frozenset` objects to
    `list`s. Objects that implement a `__json__` method are converted by calling it.
    """
    if hasattr(o, '__json__'):
        return o.__json__()
    if isinstance(o, (bytes, bytearray, memoryview)):
        return bytes(o).hex()
    if isinstance(o, (set, tuple, frozenset)):
        return sorted(o) if isinstance(o, (set, frozenset)) else list(o)
    raise TypeError


def dumps(object, pretty: bool = False) -> bytes:
    options = orjson.OPT_NON_STR_KEYS
    if pretty:
        options |= orjson.OPT_INDENT_2
    return orjson.dumps(object, option=options, default=standard_conversions)


def loads(data):
    # orjson does not like subclasses of bytearray
    if isinstance(data, bytearray):
        data = memoryview(data)
    return orjson.loads(data)
