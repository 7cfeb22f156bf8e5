#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Integration of freshly analyzed blocks into the block corpus, and the reverse direction: finding
files that share content with a given file.
"""
from __future__ import annotations

import dataclasses

from typing import Collection, Dict, Iterable, List, NamedTuple

from vptable.lib.blocks import AnalyzedBlock, unique_blocks
from vptable.lib.environment import logger
from vptable.lib.store import BlockStore, TableBlock

log = logger(__name__)


class DedupResult(NamedTuple):
    created: List[bytes]
    updated: List[bytes]


def store_blocks(store: BlockStore, blocks: Iterable[AnalyzedBlock], file_id: str) -> DedupResult:
    """
    Add the blocks of one file to the store. Blocks with an unknown hash become new table blocks
    that reference only this file; for known hashes, the file is added to the existing record.
    The operation is idempotent, so analyzing the same file again leaves the store unchanged.
    """
    blocks = list(unique_blocks(blocks))
    known = store.find(block.hash for block in blocks)
    result = DedupResult([], [])
    for block in blocks:
        if store.upsert(block, file_id):
            result.created.append(block.hash)
            continue
        if block.hash not in known:
            log.debug(F'block {block.hash.hex()} was created concurrently')
        result.updated.append(block.hash)
    log.info(F'stored blocks of {file_id}: {len(result.created)} new, {len(result.updated)} known')
    return result


@dataclasses.dataclass
class BlockMatch:
    file: str
    matched_count: int
    matched_bytes: int
    count_percentage: float
    bytes_percentage: float

    @property
    def score(self) -> float:
        return self.count_percentage + self.bytes_percentage


def match_blocks(
    store: BlockStore,
    file_id: str,
    threshold: float = 50,
    exclude: Collection[str] = (),
) -> List[BlockMatch]:
    """
    Find files that share blocks with the given file. A match is reported when the percentage of
    shared blocks and the percentage of shared bytes add up to more than the threshold; results
    are sorted by that sum, best match first. Files listed in `exclude` are never reported.
    """
    blocks = store.blocks_of(file_id)
    total_count = len(blocks)
    total_bytes = sum(block.bytes for block in blocks)
    if not total_count:
        return []
    shared: Dict[str, List[TableBlock]] = {}
    for block in blocks:
        for other in block.files:
            if other == file_id or other in exclude:
                continue
            shared.setdefault(other, []).append(block)
    matches = []
    for other, matched in shared.items():
        matched_bytes = sum(block.bytes for block in matched)
        match = BlockMatch(
            other,
            len(matched),
            matched_bytes,
            len(matched) / total_count * 100,
            matched_bytes / total_bytes * 100 if total_bytes else 0.0,
        )
        if match.score > threshold:
            matches.append(match)
    matches.sort(key=lambda m: (-m.score, m.file))
    return matches
