#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Access to the compound binary file (OLE/CFB) container of a table file. A table file organizes
its data in named storages, each of which holds named streams; the two storages of interest are
`GameStg` and `TableInfo`.
"""
from __future__ import annotations

import os
import struct

from typing import Iterator

import olefile

from vptable.lib.environment import logger

log = logger(__name__)


class ContainerNotFound(FileNotFoundError):
    def __init__(self, path: str):
        super().__init__(F'File "{path}" does not exist.')
        self.path = path


class CorruptContainer(ValueError):
    def __init__(self, path: str, reason: str = 'not a compound binary file'):
        super().__init__(F'Unable to read "{path}": {reason}.')
        self.path = path
        self.reason = reason


class CorruptStream(CorruptContainer):
    pass


class MissingStorage(LookupError):
    def __init__(self, name: str):
        super().__init__(F'No such storage "{name}".')
        self.name = name


class MissingStream(LookupError):
    def __init__(self, storage: str, name: str):
        super().__init__(F'No such stream "{name}" in storage "{storage}".')
        self.storage = storage
        self.name = name


class Storage:
    """
    A named storage inside a `vptable.lib.ole.Container`.
    """
    def __init__(self, container: Container, name: str):
        self.container = container
        self.name = name

    def __repr__(self):
        return F'<storage:{self.name}>'

    def _path(self, name: str) -> str:
        return F'{self.name}/{name}'

    def __contains__(self, name: str) -> bool:
        return self.container.document.get_type(self._path(name)) == olefile.STGTY_STREAM

    def streams(self) -> Iterator[str]:
        """
        Iterate the names of all streams that are direct children of this storage.
        """
        for path in self.container.document.listdir(streams=True, storages=False):
            if len(path) == 2 and path[0] == self.name:
                yield path[1]

    def read_stream(self, name: str) -> bytes:
        """
        Read the stream with the given name completely into memory. The parsers require random
        access to the stream contents, so the stream is never handed out as a file object.
        """
        if name not in self:
            raise MissingStream(self.name, name)
        path = self._path(name)
        try:
            with self.container.document.openstream(path) as stream:
                data = stream.read()
        except (OSError, ValueError, IndexError, struct.error) as error:
            raise CorruptStream(self.container.path, F'stream {path} is unreadable, {error!s}') from error
        log.debug(F'read {len(data)} bytes from {path}')
        return data


class Container:
    """
    An opened table file. The container is meant to be used as a context manager so that the
    underlying file handle is released after the extraction completes:

        with Container(path) as container:
            data = container.require('GameStg').read_stream('GameData')
    """
    def __init__(self, path: str | os.PathLike):
        path = os.fspath(path)
        self.path = path
        if not os.path.isfile(path):
            raise ContainerNotFound(path)
        if not olefile.isOleFile(path):
            raise CorruptContainer(path)
        try:
            self.document = olefile.OleFileIO(path)
        except (OSError, ValueError, IndexError, OverflowError, struct.error) as error:
            raise CorruptContainer(path, str(error)) from error

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
        return False

    def close(self):
        self.document.close()

    def storages(self) -> Iterator[str]:
        for path in self.document.listdir(streams=False, storages=True):
            if len(path) == 1:
                yield path[0]

    def storage(self, name: str) -> Storage | None:
        """
        Return the storage with the given name, or `None` if the container has no such storage.
        """
        if self.document.get_type(name) != olefile.STGTY_STORAGE:
            return None
        return Storage(self, name)

    def require(self, name: str) -> Storage:
        """
        Like `vptable.lib.ole.Container.storage`, but raises `vptable.lib.ole.MissingStorage`
        instead of returning `None`.
        """
        storage = self.storage(name)
        if storage is None:
            raise MissingStorage(name)
        return storage
