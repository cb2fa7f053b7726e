"""Diagnostic sinks for logscanner.

Workers report progress and per-file errors through a sink instead of
writing to the console directly.  Sinks are fire-and-forget: a failing
console write is dropped rather than raised into the scan.
"""

from __future__ import annotations

import threading
from typing import List, Optional, Protocol, Tuple

from rich.console import Console
from rich.markup import escape

from ..errors import FileAccessError


class DiagnosticSink(Protocol):
    def processing(self, worker_id: int, path: str) -> None: ...

    def file_error(self, error: FileAccessError) -> None: ...


class NullDiagnostics:
    """Discard every notice."""

    def processing(self, worker_id: int, path: str) -> None:
        pass

    def file_error(self, error: FileAccessError) -> None:
        pass


class GuardedDiagnostics:
    """Wrap a sink so that its failures never reach the caller.

    Workers talk to the sink through this wrapper.  A notice whose delivery
    raises is dropped and counted in ``dropped``.
    """

    def __init__(self, sink: DiagnosticSink):
        self.sink = sink
        self._lock = threading.Lock()
        self.dropped = 0

    def processing(self, worker_id: int, path: str) -> None:
        try:
            self.sink.processing(worker_id, path)
        except Exception:
            self._drop()

    def file_error(self, error: FileAccessError) -> None:
        try:
            self.sink.file_error(error)
        except Exception:
            self._drop()

    def _drop(self) -> None:
        with self._lock:
            self.dropped += 1


class ConsoleDiagnostics:
    """Print notices to standard error with ``rich``.

    Args:
        console: Console to write to; defaults to a stderr console.
        show_progress: Print the per-worker "processing" notices.  Error
            notices are always printed.
    """

    def __init__(self, console: Optional[Console] = None, show_progress: bool = True):
        self.console = console or Console(stderr=True)
        self.show_progress = show_progress

    def processing(self, worker_id: int, path: str) -> None:
        if self.show_progress:
            self._emit(f'[dim]\\[Worker {worker_id}][/dim] Processing file: {escape(path)}')

    def file_error(self, error: FileAccessError) -> None:
        self._emit(f'[yellow]{escape(str(error))}[/yellow]')

    def _emit(self, message: str) -> None:
        try:
            self.console.print(message, highlight=False, soft_wrap=True)
        except (OSError, ValueError):
            # stderr closed or unwritable; diagnostics never fail a scan
            pass


class RecordingDiagnostics:
    """Keep notices in memory, e.g. for tests or embedding callers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.processed: List[Tuple[int, str]] = []
        self.errors: List[FileAccessError] = []

    def processing(self, worker_id: int, path: str) -> None:
        with self._lock:
            self.processed.append((worker_id, path))

    def file_error(self, error: FileAccessError) -> None:
        with self._lock:
            self.errors.append(error)
