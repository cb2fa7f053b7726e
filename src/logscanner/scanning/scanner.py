"""File scanning for logscanner.

Reads one file line by line and yields a ``Match`` for every line that
contains one of the requested keywords.  Files are read as raw bytes and
split on ``\\n``; a trailing ``\\r`` is dropped so Windows line endings do not
leak into the reported text.  Open and read failures are reported to the
diagnostic sink and end the scan of that file only, as does a line longer
than ``MAX_LINE_BYTES``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional

from ..diagnostics.sink import DiagnosticSink, GuardedDiagnostics, NullDiagnostics
from ..errors import FileAccessError
from ..matching.engine import contains_any_keyword

TEXT_ENCODING = 'utf-8'
MAX_LINE_BYTES = 1024 * 1024


@dataclass(frozen=True)
class Match:
    file: str
    line: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def decode_line(raw: bytes) -> str:
    """Strip the line terminator from ``raw`` and decode it.

    Invalid UTF-8 sequences are replaced rather than rejected; binary files
    are scanned like any other text.
    """
    if raw.endswith(b'\n'):
        raw = raw[:-1]
    if raw.endswith(b'\r'):
        raw = raw[:-1]
    return raw.decode(TEXT_ENCODING, errors='replace')


def _guarded(diagnostics: Optional[DiagnosticSink]) -> GuardedDiagnostics:
    if isinstance(diagnostics, GuardedDiagnostics):
        return diagnostics
    return GuardedDiagnostics(diagnostics or NullDiagnostics())


def scan_file(
    path: str,
    keywords: Iterable[str],
    diagnostics: Optional[DiagnosticSink] = None,
    max_line_bytes: int = MAX_LINE_BYTES,
) -> Iterator[Match]:
    """Yield matches for ``path`` in line order.

    Args:
        path: File to scan.  Reported verbatim in each ``Match``.
        keywords: Keywords to look for, compared case-insensitively.
        diagnostics: Receives a ``FileAccessError`` if the file cannot be
            opened, a read fails part way through, or a line is longer than
            ``max_line_bytes``.  Failures of the sink itself are dropped.
        max_line_bytes: Longest line accepted, excluding its terminator.

    Yields:
        ``Match`` objects with 1-based line numbers.  Matches yielded before a
        read error remain valid.
    """
    sink = _guarded(diagnostics)
    keywords = tuple(keywords)
    try:
        handle = Path(path).open('rb')
    except OSError as exc:
        sink.file_error(FileAccessError(f'Error opening the file {path}: {exc}', path=path))
        return
    with handle:
        line_no = 0
        while True:
            try:
                raw = handle.readline(max_line_bytes + 1)
            except OSError as exc:
                sink.file_error(FileAccessError(f'Error reading {path}: {exc}', path=path))
                return
            if not raw:
                return
            line_no += 1
            if len(raw) > max_line_bytes and not raw.endswith(b'\n'):
                sink.file_error(FileAccessError(
                    f'Error reading {path}: line {line_no} is longer than {max_line_bytes} bytes',
                    path=path,
                ))
                return
            text = decode_line(raw)
            if contains_any_keyword(text, keywords):
                yield Match(file=path, line=line_no, text=text)
