#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
A common interface to all configuration settings of the table analysis which are available via
environment variables. This module is also host to the logging configuration.

Settings in this module are only ever consulted to compute default arguments at the outermost
call; the parsers themselves receive every toggle as an explicit parameter.
"""
from __future__ import annotations

import os
import logging

from enum import IntEnum
from typing import Optional, TypeVar, Generic

_T = TypeVar('_T')


class LogLevel(IntEnum):
    """
    An enumeration representing the current log level:
    """
    DETACHED = logging.CRITICAL + 100
    """
    The library is used from code that does not want any console output at all; problems are
    only communicated by raising exceptions.
    """

    @classmethod
    def FromVerbosity(cls, verbosity: int):
        if verbosity < 0:
            return cls.DETACHED
        return {
            0: cls.WARNING,
            1: cls.INFO,
            2: cls.DEBUG
        }.get(verbosity, cls.DEBUG)

    NOTSET   = logging.NOTSET    # noqa
    CRITICAL = logging.CRITICAL  # noqa
    ERROR    = logging.ERROR     # noqa
    WARNING  = logging.WARNING   # noqa
    INFO     = logging.INFO      # noqa
    DEBUG    = logging.DEBUG     # noqa


class TableFormatter(logging.Formatter):

    NAMES = {
        logging.CRITICAL : 'failure',
        logging.ERROR    : 'failure',
        logging.WARNING  : 'warning',
        logging.INFO     : 'comment',
        logging.DEBUG    : 'verbose',
    }

    def __init__(self, format, **kwargs):
        super().__init__(format, **kwargs)

    def formatMessage(self, record: logging.LogRecord) -> str:
        record.custom_level_name = self.NAMES.get(record.levelno, record.levelname.lower())
        return super().formatMessage(record)


class EnvironmentVariableSetting(Generic[_T]):
    key: str
    value: Optional[_T]

    def __init__(self, name: str):
        self.key = F'VPTABLE_{name}'
        self.value = self.read()

    def read(self) -> Optional[_T]:
        return None


class EVBool(EnvironmentVariableSetting[bool]):
    def read(self):
        value = os.environ.get(self.key, None)
        if value is None:
            return False
        else:
            value = value.lower().strip()
        if not value:
            return False
        if value.isdigit():
            return bool(int(value))
        return value not in {'no', 'off', 'false'}


class EVInt(EnvironmentVariableSetting[int]):

    def __init__(self, name: str, default: int = 0):
        self.default = default
        super().__init__(name)

    def read(self):
        try:
            return int(os.environ[self.key], 0)
        except (KeyError, ValueError):
            return self.default


class EVLog(EnvironmentVariableSetting[Optional[LogLevel]]):
    def read(self):
        try:
            loglevel = os.environ[self.key]
        except KeyError:
            return None
        if loglevel.isdigit():
            return LogLevel.FromVerbosity(int(loglevel))
        try:
            loglevel = LogLevel[loglevel.upper()]
        except KeyError:
            levels = ', '.join(ll.name for ll in LogLevel)
            logging.getLogger(__name__).warning(
                F'ignoring unknown verbosity "{loglevel!r}"; pick from: {levels}')
            return None
        else:
            return loglevel


class environment:
    verbosity = EVLog('VERBOSITY')
    blockmatch_threshold = EVInt('BLOCKMATCH_THRESHOLD', 50)
    include_same_release = EVBool('INCLUDE_SAME_RELEASE')


def logger(name: str) -> logging.Logger:
    """
    Obtain a logger which is configured with the default table analysis format. When the
    `VPTABLE_VERBOSITY` variable is set, it determines the level of the logger.
    """
    logger = logging.getLogger(name)
    if not logger.hasHandlers():
        stream = logging.StreamHandler()
        stream.setFormatter(TableFormatter(
            '({asctime}) {custom_level_name} in {name}: {message}',
            style='{',
            datefmt='%H:%M:%S',
        ))
        logger.addHandler(stream)
    if (level := environment.verbosity.value) is not None:
        logger.setLevel(level)
    logger.propagate = False
    return logger
