"""Error types for logscanner.

Configuration, traversal, worker, serialization and output errors make a
run fail.  ``FileAccessError`` is reported through diagnostics and never
propagates out of a worker.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional


class ErrorKind(StrEnum):
    """Categorize scan errors by the stage that produced them."""

    CONFIG = 'config'
    FILE_ACCESS = 'file_access'
    TRAVERSAL = 'traversal'
    SERIALIZATION = 'serialization'
    OUTPUT = 'output'
    WORKER = 'worker'


class LogScannerError(Exception):
    """Base exception for logscanner failures."""

    kind: ErrorKind = ErrorKind.CONFIG

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigurationError(LogScannerError):
    kind = ErrorKind.CONFIG


class FileAccessError(LogScannerError):
    kind = ErrorKind.FILE_ACCESS


class TraversalError(LogScannerError):
    kind = ErrorKind.TRAVERSAL


class SerializationError(LogScannerError):
    kind = ErrorKind.SERIALIZATION


class OutputWriteError(LogScannerError):
    kind = ErrorKind.OUTPUT


class WorkerError(LogScannerError):
    """A worker failed on one file for a reason other than file access."""

    kind = ErrorKind.WORKER


__all__ = [
    'ConfigurationError',
    'ErrorKind',
    'FileAccessError',
    'LogScannerError',
    'OutputWriteError',
    'SerializationError',
    'TraversalError',
    'WorkerError',
]
