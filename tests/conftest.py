"""Shared fixtures for logscanner tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Union

import pytest

WriteFile = Callable[[str, Union[str, bytes]], Path]


@pytest.fixture
def write_file(tmp_path: Path) -> WriteFile:
    """Create a file below ``tmp_path``, making parent directories as needed."""

    def _write(relpath: str, content: Union[str, bytes]) -> Path:
        path = tmp_path / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode('utf-8') if isinstance(content, str) else content
        path.write_bytes(data)
        return path

    return _write
