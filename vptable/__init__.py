R"""
Analysis of Visual Pinball table files.

A table file is a compound binary file whose `GameStg` storage holds the table script and
every embedded asset as BIFF-style record streams, and whose `TableInfo` storage holds the
human readable table information. This package

1. extracts the table script and the table information (`vptable.lib.script`), and
2. decomposes the file into content-addressable blocks (`vptable.table.analyze_file`) which
   are deduplicated against a corpus of blocks from all uploaded files (`vptable.lib.dedup`).

The most important entry points are re-exported here.
"""
from __future__ import annotations

__version__ = '0.4.2'
__distribution__ = 'vptable'

from vptable.lib.blocks import AnalyzedBlock
from vptable.lib.dedup import match_blocks, store_blocks
from vptable.lib.items import ItemType
from vptable.lib.script import get_table_info, read_script_from_table
from vptable.lib.store import MemoryBlockStore, SQLiteBlockStore, TableBlock
from vptable.table import MetadataError, TableProcessor, analyze_file

__all__ = [
    'AnalyzedBlock',
    'analyze_file',
    'get_table_info',
    'ItemType',
    'match_blocks',
    'MemoryBlockStore',
    'MetadataError',
    'read_script_from_table',
    'SQLiteBlockStore',
    'store_blocks',
    'TableBlock',
    'TableProcessor',
]
