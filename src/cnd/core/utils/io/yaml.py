"""YAML files read under the shared sidecar lock and written atomically."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .core import atomic_write, file_lock


def read_yaml(path: Path, default: Any = None, raise_on_error: bool = False) -> Any:
    """Parse the YAML document at ``path``.

    A missing, unreadable or unparseable file yields ``default``. With
    ``raise_on_error`` the failure propagates instead: ``FileNotFoundError``
    for a missing file, otherwise the original ``OSError`` or
    ``yaml.YAMLError`` so callers can tell the two apart. An empty document
    is ``default`` either way.
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        with file_lock(path, shared=True), open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError, UnicodeDecodeError):
        if raise_on_error:
            raise
        return default
    return default if data is None else data


def write_yaml(path: Path, data: Any) -> None:
    """Atomically replace ``path`` with ``data`` dumped as block-style YAML (sorted keys)."""

    def _dump(f) -> None:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True, allow_unicode=True)

    atomic_write(Path(path), _dump)


__all__ = ["read_yaml", "write_yaml"]
