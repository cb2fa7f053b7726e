"""Worker supervisor for logscanner.

Coordinates the concurrent part of a scan.  The calling thread walks the
directory tree and feeds discovered paths into a bounded ``PathQueue``; a
fixed pool of worker threads drains the queue, scans one file at a time and
appends matches to a shared ``ResultSet``.  ``scan_tree`` returns once the
walk has ended and every worker has finished its last file.

Match order across files depends on scheduling.  Matches from a single file
always appear with increasing line numbers.
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple

from ..diagnostics.sink import DiagnosticSink, GuardedDiagnostics, NullDiagnostics
from ..discovery.engine import discover_files
from ..errors import TraversalError, WorkerError
from ..scanning.request import DEFAULT_QUEUE_SIZE, ScanRequest
from ..scanning.scanner import Match, scan_file

_CLOSED = object()


class PathQueue:
    """Bounded single-producer, multi-consumer queue of file paths.

    The producer calls ``close`` exactly once when it is done.  Consumers
    iterate until the queue is closed and drained.
    """

    def __init__(self, capacity: int = DEFAULT_QUEUE_SIZE):
        self._queue: queue.Queue = queue.Queue(maxsize=capacity)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, path: str) -> None:
        """Add ``path``, blocking while the queue is full."""
        if self._closed:
            raise RuntimeError('put() on a closed PathQueue')
        self._queue.put(path)

    def close(self) -> None:
        if self._closed:
            raise RuntimeError('PathQueue closed twice')
        self._closed = True
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[str]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                # hand the marker on so every other consumer sees it too
                self._queue.put(_CLOSED)
                return
            yield item


class ResultSet:
    """Thread-safe, append-only sequence of matches."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._matches: List[Match] = []

    def append(self, match: Match) -> None:
        with self._lock:
            self._matches.append(match)

    def snapshot(self) -> List[Match]:
        with self._lock:
            return list(self._matches)

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)


@dataclass
class ScanReport:
    """Outcome of ``scan_tree``.

    ``error`` is set when the walk stopped early and ``worker_errors`` lists
    files a worker could not finish.  ``matches`` still holds everything
    found in either case.
    """

    matches: List[Match]
    error: Optional[TraversalError] = None
    worker_errors: List[WorkerError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and not self.worker_errors


class WorkerSupervisor:
    """Run a fixed number of worker threads and wait for all of them.

    An exception escaping a worker ends that thread only; it is kept in
    ``failures`` as ``(worker_id, exception)``.
    """

    def __init__(self, max_workers: int):
        if max_workers < 1:
            raise ValueError(f'max_workers must be at least 1, got {max_workers}')
        self.max_workers = max_workers
        self.failures: List[Tuple[int, BaseException]] = []
        self._lock = threading.Lock()
        self._threads: List[threading.Thread] = []

    def start(self, worker: Callable[[int], None]) -> None:
        """Start ``max_workers`` threads, each calling ``worker(worker_id)``."""
        for worker_id in range(self.max_workers):
            t = threading.Thread(
                target=self._run,
                args=(worker, worker_id),
                name=f'logscanner-worker-{worker_id}',
                daemon=True,
            )
            self._threads.append(t)
            t.start()

    def join(self) -> None:
        for t in self._threads:
            t.join()
        self._threads.clear()

    def _run(self, worker: Callable[[int], None], worker_id: int) -> None:
        try:
            worker(worker_id)
        except Exception as exc:
            with self._lock:
                self.failures.append((worker_id, exc))


def scan_tree(
    request: ScanRequest,
    diagnostics: Optional[DiagnosticSink] = None,
    results: Optional[ResultSet] = None,
) -> ScanReport:
    """Scan every matching file under ``request.start_dir``.

    Args:
        request: Validated scan parameters.
        diagnostics: Receives progress notices and per-file errors.  Per-file
            errors never end the scan, and neither does a failing sink.
        results: Caller-owned collection to append to; a new one is created
            if omitted.

    Returns:
        A ``ScanReport`` with all matches, the traversal error if any, and a
        ``WorkerError`` for every file a worker failed on unexpectedly.
    """
    sink = GuardedDiagnostics(diagnostics or NullDiagnostics())
    collected = results if results is not None else ResultSet()
    paths = PathQueue(request.queue_size)
    worker_errors: List[WorkerError] = []
    errors_lock = threading.Lock()

    def work(worker_id: int) -> None:
        for path in paths:
            sink.processing(worker_id, path)
            try:
                for match in scan_file(path, request.keywords, sink):
                    collected.append(match)
            except Exception as exc:
                # the worker moves on; the queue must keep draining
                failure = WorkerError(f'Worker {worker_id} failed on {path}: {exc!r}', path=path)
                failure.__cause__ = exc
                with errors_lock:
                    worker_errors.append(failure)

    supervisor = WorkerSupervisor(request.workers)
    supervisor.start(work)
    error: Optional[TraversalError] = None
    try:
        for path in discover_files(request.start_dir, request.extensions):
            paths.put(path)
    except TraversalError as exc:
        error = exc
    finally:
        paths.close()
        supervisor.join()
    for worker_id, exc in supervisor.failures:
        failure = WorkerError(f'Worker {worker_id} stopped: {exc!r}')
        failure.__cause__ = exc
        worker_errors.append(failure)
    return ScanReport(matches=collected.snapshot(), error=error, worker_errors=worker_errors)
