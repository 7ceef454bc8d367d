"""I/O utilities for cnd.

- core: atomic writes, sidecar locks, directory management
- yaml: YAML read/write with advisory locks
"""
from __future__ import annotations

from .core import atomic_write, ensure_directory, ensure_parent_dir, file_lock, lock_path_for
from .yaml import read_yaml, write_yaml

__all__ = [
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "file_lock",
    "lock_path_for",
    "read_yaml",
    "write_yaml",
]
