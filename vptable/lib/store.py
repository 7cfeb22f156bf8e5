#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Persistence of table blocks. A table block maps one content hash to the set of files that
contain this content. The store is the only state that is shared between concurrent analyses of
different files, and every implementation has to guarantee that a hash is never stored twice:
two analyses that discover the same new content at the same time must end up with a single
record that references both files.
"""
from __future__ import annotations

import abc
import dataclasses
import os
import sqlite3
import threading

from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from vptable.lib import json
from vptable.lib.blocks import AnalyzedBlock
from vptable.lib.items import ItemType


@dataclasses.dataclass
class TableBlock:
    hash: bytes
    bytes: int
    type: ItemType
    meta: Dict[str, Any]
    files: Set[str] = dataclasses.field(default_factory=set)

    def __post_init__(self):
        self.type = ItemType(self.type)

    def __repr__(self):
        return F'<tableblock:{self.type.value}:{self.hash.hex()}:{len(self.files)}>'

    @classmethod
    def FromAnalysis(cls, block: AnalyzedBlock, file_id: str) -> TableBlock:
        return cls(block.hash, block.bytes, block.type, dataclasses.asdict(block.meta), {file_id})


class BlockStore(abc.ABC):
    """
    The contract of a table block store.
    """

    @abc.abstractmethod
    def get(self, hash: bytes) -> Optional[TableBlock]:
        """
        Return the block with the given hash, or `None`.
        """

    @abc.abstractmethod
    def upsert(self, block: AnalyzedBlock, file_id: str) -> bool:
        """
        Record that the given file contains the given block. A new table block is created when
        the hash is unknown; otherwise, the file is added to the files of the existing block. The
        method returns whether a new table block was created. Calling it repeatedly with the same
        arguments has no further effect.
        """

    @abc.abstractmethod
    def blocks_of(self, file_id: str) -> List[TableBlock]:
        """
        All table blocks that reference the given file.
        """

    @abc.abstractmethod
    def remove_file(self, file_id: str) -> int:
        """
        Remove the file from all table blocks and delete the blocks that are no longer referenced
        by any file. Returns the number of deleted blocks.
        """

    @abc.abstractmethod
    def __iter__(self) -> Iterator[TableBlock]:
        ...

    def __len__(self):
        return sum(1 for _ in self)

    def find(self, hashes: Iterable[bytes]) -> Dict[bytes, TableBlock]:
        """
        Look up several hashes at once; hashes that are unknown are missing from the result.
        """
        found = {}
        for hash in hashes:
            if (block := self.get(hash)) is not None:
                found[hash] = block
        return found


class MemoryBlockStore(BlockStore):
    """
    A block store that is kept in memory; it is safe to use from several threads.
    """
    def __init__(self):
        self._blocks: Dict[bytes, TableBlock] = {}
        self._lock = threading.RLock()

    def get(self, hash: bytes) -> Optional[TableBlock]:
        with self._lock:
            block = self._blocks.get(hash)
            if block is not None:
                block = dataclasses.replace(block, files=set(block.files))
            return block

    def upsert(self, block: AnalyzedBlock, file_id: str) -> bool:
        with self._lock:
            stored = self._blocks.get(block.hash)
            if stored is None:
                self._blocks[block.hash] = TableBlock.FromAnalysis(block, file_id)
                return True
            stored.files.add(file_id)
            return False

    def blocks_of(self, file_id: str) -> List[TableBlock]:
        with self._lock:
            return [self.get(h) for h, b in self._blocks.items() if file_id in b.files]

    def remove_file(self, file_id: str) -> int:
        with self._lock:
            orphans = []
            for hash, block in self._blocks.items():
                block.files.discard(file_id)
                if not block.files:
                    orphans.append(hash)
            for hash in orphans:
                del self._blocks[hash]
            return len(orphans)

    def __iter__(self) -> Iterator[TableBlock]:
        with self._lock:
            hashes = list(self._blocks)
        for hash in hashes:
            if (block := self.get(hash)) is not None:
                yield block

    def __len__(self):
        return len(self._blocks)


class SQLiteBlockStore(BlockStore):
    """
    A block store backed by an SQLite database. The primary key on the hash column enforces
    uniqueness, and every upsert runs in its own transaction, so several processes may share
    the same database file.
    """
    SCHEMA = (
        'CREATE TABLE IF NOT EXISTS blocks ('
        '  hash  BLOB PRIMARY KEY,'
        '  bytes INTEGER NOT NULL,'
        '  type  TEXT NOT NULL,'
        '  meta  TEXT NOT NULL'
        ')',
        'CREATE TABLE IF NOT EXISTS block_files ('
        '  hash BLOB NOT NULL REFERENCES blocks(hash) ON DELETE CASCADE,'
        '  file TEXT NOT NULL,'
        '  PRIMARY KEY (hash, file)'
        ')',
        'CREATE INDEX IF NOT EXISTS block_files_by_file ON block_files (file)',
    )

    def __init__(self, path: str | os.PathLike = ':memory:', timeout: float = 30.0):
        self.connection = sqlite3.connect(os.fspath(path), timeout=timeout, check_same_thread=False)
        self._lock = threading.RLock()
        self.connection.execute('PRAGMA foreign_keys = ON')
        with self._lock, self.connection:
            for statement in self.SCHEMA:
                self.connection.execute(statement)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
        return False

    def close(self):
        self.connection.close()

    def _files(self, hash: bytes) -> Set[str]:
        cursor = self.connection.execute('SELECT file FROM block_files WHERE hash = ?', (hash,))
        return {file for file, in cursor}

    def _block(self, row) -> TableBlock:
        hash, size, type, meta = row
        hash = bytes(hash)
        return TableBlock(hash, size, ItemType(type), json.loads(meta), self._files(hash))

    def get(self, hash: bytes) -> Optional[TableBlock]:
        with self._lock:
            row = self.connection.execute(
                'SELECT hash, bytes, type, meta FROM blocks WHERE hash = ?', (hash,)).fetchone()
            return None if row is None else self._block(row)

    def upsert(self, block: AnalyzedBlock, file_id: str) -> bool:
        meta = json.dumps(block.meta).decode('utf8')
        with self._lock, self.connection:
            cursor = self.connection.execute(
                'INSERT INTO blocks (hash, bytes, type, meta) VALUES (?, ?, ?, ?) '
                'ON CONFLICT (hash) DO NOTHING',
                (block.hash, block.bytes, block.type.value, meta))
            created = cursor.rowcount == 1
            self.connection.execute(
                'INSERT INTO block_files (hash, file) VALUES (?, ?) '
                'ON CONFLICT (hash, file) DO NOTHING',
                (block.hash, file_id))
        return created

    def blocks_of(self, file_id: str) -> List[TableBlock]:
        with self._lock:
            rows = self.connection.execute(
                'SELECT b.hash, b.bytes, b.type, b.meta FROM blocks b '
                'JOIN block_files f ON f.hash = b.hash WHERE f.file = ? ORDER BY b.rowid',
                (file_id,)).fetchall()
            return [self._block(row) for row in rows]

    def remove_file(self, file_id: str) -> int:
        with self._lock, self.connection:
            hashes = [bytes(h) for h, in self.connection.execute(
                'SELECT hash FROM block_files WHERE file = ?', (file_id,))]
            self.connection.execute('DELETE FROM block_files WHERE file = ?', (file_id,))
            deleted = 0
            for hash in hashes:
                cursor = self.connection.execute(
                    'DELETE FROM blocks WHERE hash = ? AND NOT EXISTS '
                    '(SELECT 1 FROM block_files WHERE block_files.hash = blocks.hash)', (hash,))
                deleted += cursor.rowcount
        return deleted

    def __iter__(self) -> Iterator[TableBlock]:
        with self._lock:
            rows = self.connection.execute(
                'SELECT hash, bytes, type, meta FROM blocks ORDER BY rowid').fetchall()
            blocks = [self._block(row) for row in rows]
        yield from blocks

    def __len__(self):
        with self._lock:
            count, = self.connection.execute('SELECT COUNT(*) FROM blocks').fetchone()
        return count
