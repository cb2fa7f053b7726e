"""Scan request model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import ConfigurationError

DEFAULT_START_DIR = '/'
DEFAULT_EXTENSIONS = '.log,.csv'
DEFAULT_WORKERS = 8
DEFAULT_QUEUE_SIZE = 100


@dataclass(frozen=True)
class ScanRequest:
    """Immutable description of one scan.

    ``extensions`` and ``keywords`` must both be non-empty and ``workers``
    must be at least 1; otherwise ``ConfigurationError`` is raised.
    """

    start_dir: str
    extensions: Tuple[str, ...]
    keywords: Tuple[str, ...]
    workers: int = DEFAULT_WORKERS
    queue_size: int = DEFAULT_QUEUE_SIZE

    def __post_init__(self) -> None:
        object.__setattr__(self, 'extensions', tuple(self.extensions))
        object.__setattr__(self, 'keywords', tuple(self.keywords))
        if not self.extensions or not self.keywords:
            raise ConfigurationError('you must specify both extensions and keywords')
        if self.workers < 1:
            raise ConfigurationError(f'worker count must be at least 1, got {self.workers}')
        if self.queue_size < 1:
            raise ConfigurationError(f'queue size must be at least 1, got {self.queue_size}')

