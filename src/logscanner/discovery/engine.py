"""Discovery engine for logscanner.

Recursively walks a start directory and yields the paths of regular files
whose name ends with one of the allowed extensions.  Traversal is
fail-fast: the first error reported by ``os.walk`` (an unreadable
directory, a missing start path) stops the walk and is raised as a
``TraversalError``.
"""

from __future__ import annotations

import os
from typing import Iterator, NoReturn, Sequence

from ..errors import TraversalError
from ..matching.engine import has_allowed_extension


def _abort(exc: OSError) -> NoReturn:
    path = exc.filename if exc.filename is not None else ''
    raise TraversalError(f'{path}: {exc.strerror or exc}', path=str(path)) from exc


def discover_files(start_dir: str, extensions: Sequence[str]) -> Iterator[str]:
    """Yield paths of files under ``start_dir`` whose name matches ``extensions``.

    Args:
        start_dir: Root of the traversal.  A plain file is yielded on its own
            if its name passes the filter.
        extensions: Allowed suffixes, compared exactly and case-sensitively.

    Yields:
        Paths joined onto ``start_dir``, each at most once.  Sibling order is
        whatever the filesystem returns.

    Raises:
        TraversalError: the walk could not continue.
    """
    if os.path.isfile(start_dir):
        if has_allowed_extension(os.path.basename(start_dir), extensions):
            yield start_dir
        return
    for root, _, files in os.walk(start_dir, onerror=_abort):
        for name in files:
            if not has_allowed_extension(name, extensions):
                continue
            path = os.path.join(root, name)
            # skip fifos, sockets and device nodes; dangling links are yielded
            # so the scanner reports them
            if os.path.isfile(path) or not os.path.exists(path):
                yield path
