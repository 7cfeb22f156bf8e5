#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Extractors that map the chunks of a single stream to typed metadata and the payload that
identifies the item. The `GameData` stream determines how many item streams exist; each item
stream is then named after its category and index, e.g. `Image0` or `GameItem12`.
"""
from __future__ import annotations

import dataclasses
import enum
import re

from typing import Iterable, List, Optional, Tuple, Union

from vptable.lib.biff import Chunk
from vptable.lib.structures import EOF, le32


class ItemType(str, enum.Enum):
    image = 'image'
    sound = 'sound'
    gameitem = 'gameitem'
    collection = 'collection'

    @property
    def stream_prefix(self) -> str:
        return {
            ItemType.image      : 'Image',
            ItemType.sound      : 'Sound',
            ItemType.gameitem   : 'GameItem',
            ItemType.collection : 'Collection',
        }[self]


@dataclasses.dataclass
class GameData:
    """
    Stream counters and script of the `GameData` stream.
    """
    num_textures: Optional[int] = None
    num_sounds: Optional[int] = None
    num_gameitems: Optional[int] = None
    num_collections: Optional[int] = None
    num_fonts: Optional[int] = None
    script: Optional[str] = None

    _COUNTERS = {
        'SEDT': 'num_gameitems',
        'SSND': 'num_sounds',
        'SIMG': 'num_textures',
        'SFNT': 'num_fonts',
        'SCOL': 'num_collections',
    }

    @classmethod
    def Parse(cls, chunks: Iterable[Chunk]) -> GameData:
        """
        Read the counters and the script from the chunks of a `GameData` stream. For every field,
        the first chunk that provides it wins.
        """
        self = cls()
        for chunk in chunks:
            if chunk.tag == 'CODE':
                if self.script is None:
                    self.script = chunk.data.decode('utf8', errors='replace')
                continue
            name = cls._COUNTERS.get(chunk.tag)
            if name is None or getattr(self, name) is not None:
                continue
            try:
                setattr(self, name, le32(chunk.data))
            except EOF:
                continue
        return self

    def count(self, type: ItemType) -> int:
        """
        The number of item streams of the given type, zero if the counter is missing.
        """
        value = {
            ItemType.image      : self.num_textures,
            ItemType.sound      : self.num_sounds,
            ItemType.gameitem   : self.num_gameitems,
            ItemType.collection : self.num_collections,
        }[type]
        return max(value or 0, 0)


@dataclasses.dataclass
class ImageMeta:
    stream: str
    name: Optional[str] = None
    path: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


@dataclasses.dataclass
class SoundMeta:
    stream: str
    name: Optional[str] = None
    path: Optional[str] = None
    id: Optional[str] = None


@dataclasses.dataclass
class GameItemMeta:
    stream: str
    name: Optional[str] = None


@dataclasses.dataclass
class CollectionMeta:
    stream: str
    name: Optional[str] = None


ItemMeta = Union[ImageMeta, SoundMeta, GameItemMeta, CollectionMeta]

META_TYPES = {
    ItemType.image      : ImageMeta,
    ItemType.sound      : SoundMeta,
    ItemType.gameitem   : GameItemMeta,
    ItemType.collection : CollectionMeta,
}


def parse_string(data: bytes) -> str:
    """
    Decode a UTF-8 string that follows a 4-byte length field.
    """
    return data[4:].decode('utf8', errors='replace')


def parse_string16(data: bytes) -> str:
    """
    Decode a wide string that follows a 4-byte length field by keeping only the low byte of
    every 16-bit code unit. Names that are not pure ASCII do not survive this.
    """
    return data[4::2].decode('utf8', errors='replace')


def parse_image(chunks: Iterable[Chunk], stream: str) -> Tuple[Optional[bytes], ImageMeta]:
    meta = ImageMeta(stream)
    data = None
    for chunk in chunks:
        tag = chunk.tag
        try:
            if tag == 'NAME':
                meta.name = parse_string(chunk.data)
            elif tag == 'PATH':
                meta.path = re.sub(r'\\+', r'\\', parse_string(chunk.data))
            elif tag == 'WDTH':
                meta.width = le32(chunk.data)
            elif tag == 'HGHT':
                meta.height = le32(chunk.data)
            elif tag == 'DATA':
                data = chunk.data
        except EOF:
            continue
    return data, meta


def parse_sound(chunks: List[bytes], stream: str) -> Tuple[Optional[bytes], SoundMeta]:
    """
    Sound streams consist of four untagged records: name, path, internal name and the audio
    data. Records missing from the end of the stream are reported as absent fields.
    """
    def get(index: int) -> Optional[bytes]:
        return chunks[index] if index < len(chunks) else None

    def text(index: int) -> Optional[str]:
        value = get(index)
        return None if value is None else value.decode('utf8', errors='replace')

    meta = SoundMeta(stream, text(0), text(1), text(2))
    if meta.path is not None:
        meta.path = meta.path.replace('\\', '/')
    return get(3), meta


def parse_gameitem(chunks: Iterable[Chunk], stream: str) -> GameItemMeta:
    meta = GameItemMeta(stream)
    for chunk in chunks:
        if chunk.tag == 'NAME':
            meta.name = parse_string16(chunk.data)
    return meta


def parse_collection(chunks: Iterable[Chunk], stream: str) -> CollectionMeta:
    meta = CollectionMeta(stream)
    for chunk in chunks:
        if chunk.tag == 'NAME':
            meta.name = parse_string16(chunk.data)
    return meta
