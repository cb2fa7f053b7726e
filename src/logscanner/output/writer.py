"""Result output for logscanner.

Serializes matches to a pretty-printed JSON array and writes it either to
standard output or to a file.  The whole document is built in memory and
written with a single call.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Union

from ..errors import OutputWriteError, SerializationError
from ..scanning.scanner import Match

JSON_INDENT = 2
JSON_SUFFIX = '.json'


def serialize_matches(matches: Iterable[Match], indent: int = JSON_INDENT) -> str:
    """Return ``matches`` as a JSON array of ``{file, line, text}`` objects."""
    try:
        return json.dumps([m.to_dict() for m in matches], indent=indent)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f'Error serializing json: {exc}') from exc


def resolve_output_path(raw: str) -> Path:
    """Append ``.json`` to ``raw`` unless it already ends with it."""
    if not raw.endswith(JSON_SUFFIX):
        raw += JSON_SUFFIX
    return Path(raw)


def write_output(payload: str, path: Union[str, Path]) -> Path:
    """Write ``payload`` to ``path`` in one call and return the path."""
    path = Path(path)
    try:
        with path.open('w', encoding='utf-8') as f:
            f.write(payload)
    except OSError as exc:
        raise OutputWriteError(f'Error writing to output file {path}: {exc}', path=str(path)) from exc
    return path
