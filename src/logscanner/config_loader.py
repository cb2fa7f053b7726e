"""Configuration loading for logscanner.

A YAML file can supply any of the ``scan`` options.  List options accept a
YAML list or a comma-separated string.  Values given on the command line
(or through ``LOGSCANNER_*`` environment variables) take precedence.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError
from .matching.engine import normalize_list
from .scanning.request import (
    DEFAULT_EXTENSIONS,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_START_DIR,
    DEFAULT_WORKERS,
)

CONFIG_KEYS = ('start_dir', 'extensions', 'keywords', 'output', 'workers', 'queue_size')

DEFAULTS: Dict[str, Any] = {
    'start_dir': DEFAULT_START_DIR,
    'extensions': normalize_list(DEFAULT_EXTENSIONS),
    'keywords': [],
    'output': '',
    'workers': DEFAULT_WORKERS,
    'queue_size': DEFAULT_QUEUE_SIZE,
}


def _as_list(key: str, value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return normalize_list(value)
    if isinstance(value, (list, tuple)):
        return normalize_list(','.join(str(v) for v in value))
    raise ConfigurationError(f'{key} must be a list or a comma-separated string')


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f'{key} must be an integer, got {value!r}')
    return value


def load_config(path: Path) -> Dict[str, Any]:
    """Load and validate a YAML configuration file.

    Returns only the keys present in the file, normalized.
    """
    try:
        with path.open('r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f'cannot read config file {path}: {exc}') from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f'invalid YAML in {path}: {exc}') from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f'{path} must contain a mapping')
    unknown = sorted(set(data) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigurationError(f'unknown config keys in {path}: {", ".join(unknown)}')
    cfg: Dict[str, Any] = {}
    for key, value in data.items():
        if key in ('extensions', 'keywords'):
            cfg[key] = _as_list(key, value)
        elif key in ('workers', 'queue_size'):
            cfg[key] = _as_int(key, value)
        else:
            cfg[key] = '' if value is None else str(value)
    return cfg


def merge_config(file_cfg: Optional[Dict[str, Any]], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Combine defaults, file values and overrides; ``None`` overrides are ignored."""
    cfg = dict(DEFAULTS)
    cfg.update(file_cfg or {})
    for key, value in overrides.items():
        if value is None:
            continue
        if key in ('extensions', 'keywords'):
            value = _as_list(key, value)
        cfg[key] = value
    return cfg
