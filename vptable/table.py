#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Analysis of complete table files. The function `vptable.table.analyze_file` decomposes a table
file into content-addressable blocks; `vptable.table.TableProcessor` is the entry point used by
the file processing pipeline, it produces the stored metadata of a table file and integrates its
blocks into the block corpus.
"""
from __future__ import annotations

import os
import time

from typing import Any, Callable, Collection, Dict, Iterator, List, Optional, Tuple

from vptable.lib.biff import parse_biff, parse_untagged_biff
from vptable.lib.blocks import AnalyzedBlock, analyze_block
from vptable.lib.dedup import BlockMatch, DedupResult, match_blocks, store_blocks
from vptable.lib.environment import environment, logger
from vptable.lib.items import (
    GameData,
    ItemMeta,
    ItemType,
    parse_collection,
    parse_gameitem,
    parse_image,
    parse_sound,
)
from vptable.lib.ole import Container, CorruptStream, MissingStream, Storage
from vptable.lib.script import get_table_info, read_script_from_table
from vptable.lib.store import BlockStore

log = logger(__name__)

_Extractor = Callable[[bytes, str], Tuple[Optional[bytes], ItemMeta]]


def _extract_image(data: bytes, stream: str):
    return parse_image(parse_biff(data), stream)


def _extract_sound(data: bytes, stream: str):
    return parse_sound(parse_untagged_biff(data), stream)


def _extract_gameitem(data: bytes, stream: str):
    # the stream starts with the item type, the records follow after it
    return data, parse_gameitem(parse_biff(data, 4), stream)


def _extract_collection(data: bytes, stream: str):
    return data, parse_collection(parse_biff(data), stream)


EXTRACTORS: Dict[ItemType, _Extractor] = {
    ItemType.image      : _extract_image,
    ItemType.sound      : _extract_sound,
    ItemType.gameitem   : _extract_gameitem,
    ItemType.collection : _extract_collection,
}


def read_game_data(storage: Storage) -> GameData:
    return GameData.Parse(parse_biff(storage.read_stream('GameData')))


def iter_blocks(
    storage: Storage,
    game_data: GameData,
    include: Collection[ItemType] = tuple(ItemType),
) -> Iterator[AnalyzedBlock]:
    """
    Generate the blocks of all item streams, one category after the other. Items whose stream
    is missing or whose payload cannot be located do not produce a block.
    """
    for type in ItemType:
        if type not in include:
            continue
        extract = EXTRACTORS[type]
        for index in range(game_data.count(type)):
            stream = F'{type.stream_prefix}{index}'
            try:
                data = storage.read_stream(stream)
            except (MissingStream, CorruptStream) as error:
                log.warning(F'skipping {type.value} item: {error!s}')
                continue
            payload, meta = extract(data, stream)
            block = analyze_block(payload, type, meta)
            if block is not None:
                yield block


def analyze_file(
    path: str | os.PathLike,
    include: Collection[ItemType] = tuple(ItemType),
) -> List[AnalyzedBlock]:
    """
    Return the blocks of which the given table file is made. Each block carries the hash of its
    content, which is used to look up equal content across all files, as well as its size and
    type-specific metadata. Only the item categories listed in `include` are analyzed. The list
    contains no entries for items whose payload was missing, so the position of a block in the
    list does not correspond to the index of its stream.
    """
    started = time.monotonic()
    path = os.fspath(path)
    log.info(F'analyzing {path}')
    with Container(path) as container:
        storage = container.require('GameStg')
        game_data = read_game_data(storage)
        blocks = list(iter_blocks(storage, game_data, include))
    elapsed = (time.monotonic() - started) * 1000
    log.info(F'found {len(blocks)} items in table file in {elapsed:.0f} ms:')
    log.info(F'- {game_data.count(ItemType.image)} textures')
    log.info(F'- {game_data.count(ItemType.sound)} sounds')
    log.info(F'- {game_data.count(ItemType.gameitem)} game items')
    log.info(F'- {game_data.count(ItemType.collection)} collections')
    return blocks


class MetadataError(RuntimeError):
    """
    Raised when the metadata of a table file cannot be read; the upload of such a file is
    rejected. The original error is available as the cause of this exception.
    """
    def __init__(self, path: str):
        super().__init__(F'could not parse table metadata of "{path}"')
        self.path = path


class TableProcessor:
    """
    The table file processor. The processing pipeline calls `metadata` while a table file is
    uploaded, and `process_blocks` once the file has been stored.
    """
    name = 'table'

    def __init__(
        self,
        store: BlockStore,
        include: Collection[ItemType] = tuple(ItemType),
        threshold: Optional[int] = None,
        include_same_release: Optional[bool] = None,
    ):
        if threshold is None:
            threshold = environment.blockmatch_threshold.value
        if include_same_release is None:
            include_same_release = environment.include_same_release.value
        self.store = store
        self.include = include
        self.threshold = threshold
        self.include_same_release = include_same_release

    def metadata(self, path: str | os.PathLike) -> Dict[str, Any]:
        """
        Read the table information together with the table script.
        """
        path = os.fspath(path)
        try:
            script = read_script_from_table(path)
            props: Dict[str, Any] = get_table_info(path)
        except (OSError, ValueError, LookupError) as error:
            log.error(F'error reading metadata from table: {error!s}')
            raise MetadataError(path) from error
        props.update(table_script=script.code)
        return props

    def metadata_short(self, metadata: Dict[str, Any]) -> Dict[str, Any]:
        return metadata

    def variation_data(self, metadata: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in metadata.items() if key != 'table_script'}

    def process_blocks(self, path: str | os.PathLike, file_id: str) -> DedupResult:
        """
        Analyze the table file and store its blocks under the given file id.
        """
        blocks = analyze_file(path, self.include)
        return store_blocks(self.store, blocks, file_id)

    def remove_file(self, file_id: str) -> int:
        return self.store.remove_file(file_id)

    def matches(self, file_id: str, siblings: Collection[str] = ()) -> List[BlockMatch]:
        """
        Find files similar to the given one. The `siblings` are files of the same release; they
        are not reported unless the processor was configured to include them.
        """
        exclude = () if self.include_same_release else siblings
        return match_blocks(self.store, file_id, self.threshold, exclude)
