#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Content-addressable blocks. Every item extracted from a table file is reduced to the MD5 digest
of its payload, which identifies equal content across all uploaded files regardless of where in
the file it was found.
"""
from __future__ import annotations

import dataclasses
import hashlib

from typing import Iterable, Iterator, Optional

from vptable.lib.environment import logger
from vptable.lib.items import META_TYPES, ItemMeta, ItemType
from vptable.lib.structures import buf

log = logger(__name__)


def content_hash(data: buf) -> bytes:
    """
    The 128-bit digest that identifies a block. It depends on the content only.
    """
    return hashlib.md5(data).digest()


@dataclasses.dataclass
class AnalyzedBlock:
    hash: bytes
    bytes: int
    type: ItemType
    meta: ItemMeta

    def __post_init__(self):
        self.type = ItemType(self.type)
        expected = META_TYPES[self.type]
        if not isinstance(self.meta, expected):
            raise TypeError(
                F'Metadata of a block of type {self.type.value} must be {expected.__name__}, '
                F'got {self.meta.__class__.__name__}.')

    def __repr__(self):
        return F'<block:{self.type.value}:{self.hash.hex()}:{self.bytes}>'

    def __json__(self):
        return {
            'hash': self.hash.hex(),
            'bytes': self.bytes,
            'type': self.type.value,
            'meta': dataclasses.asdict(self.meta),
        }


def analyze_block(data: Optional[buf], type: ItemType, meta: ItemMeta) -> Optional[AnalyzedBlock]:
    """
    Compute the block for the given payload. Returns `None` when there is no payload, which is
    the case for items whose data could not be located.
    """
    if not data:
        log.warning(F'ignoring empty data for {meta.stream}')
        return None
    return AnalyzedBlock(content_hash(data), len(data), ItemType(type), meta)


def unique_blocks(blocks: Iterable[AnalyzedBlock]) -> Iterator[AnalyzedBlock]:
    """
    Filter the given blocks so that every hash occurs only once; the first block wins.
    """
    seen = set()
    for block in blocks:
        if block.hash in seen:
            continue
        seen.add(block.hash)
        yield block
