"""Matching helpers for logscanner.

Pure functions used by the walker and the file scanner: list normalization
for comma-separated user input, the extension allow-list test and the
keyword containment test.
"""

from __future__ import annotations

from typing import Iterable, List


def normalize_list(raw: str) -> List[str]:
    """Split ``raw`` on commas and trim each part.

    Empty parts are dropped; order is preserved and duplicates are kept.
    """
    return [part.strip() for part in raw.split(',') if part.strip()]


def has_allowed_extension(name: str, extensions: Iterable[str]) -> bool:
    """Return ``True`` if ``name`` ends with one of ``extensions``.

    The comparison is an exact, case-sensitive suffix test, so ``data.LOG``
    does not pass ``.log``.
    """
    return any(name.endswith(ext) for ext in extensions)


def contains_any_keyword(line: str, keywords: Iterable[str]) -> bool:
    """Return ``True`` if ``line`` contains any keyword, ignoring case."""
    lowered = line.lower()
    return any(keyword.lower() in lowered for keyword in keywords)
