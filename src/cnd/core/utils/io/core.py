"""Crash-safe file writes.

Every file cnd persists is written through :func:`atomic_write`, so readers
only ever see the previous or the next complete version of a file. Writers
and readers coordinate through a ``<file>.lock`` sidecar: the temp file is
renamed over the target, so the target itself cannot carry the lock.
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, TextIO


def lock_path_for(path: Path) -> Path:
    path = Path(path)
    return path.with_name(path.name + ".lock")


@contextmanager
def file_lock(path: Path, *, shared: bool = False) -> Iterator[None]:
    """Hold the sidecar lock of ``path``.

    Exclusive locks create the sidecar. Shared locks never do: a reader of a
    file no cnd writer has touched (a kubeconfig, say) proceeds unlocked.
    """
    lock_path = lock_path_for(path)
    if shared:
        try:
            fd = os.open(lock_path, os.O_RDONLY)
        except FileNotFoundError:
            yield
            return
    else:
        ensure_parent_dir(lock_path)
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o644)
    try:
        fcntl.flock(fd, fcntl.LOCK_SH if shared else fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)


def ensure_parent_dir(path: Path) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def ensure_directory(path: Path, create: bool = True) -> Path:
    """Return ``path`` once it is known to be a directory.

    Raises:
        NotADirectoryError: Something other than a directory is in the way.
        FileNotFoundError: The directory is missing and ``create`` is False.
    """
    path = Path(path)
    if path.is_dir():
        return path
    if path.exists():
        raise NotADirectoryError(f"Path exists but is not a directory: {path}")
    if not create:
        raise FileNotFoundError(f"Directory does not exist: {path}")
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(
    path: Path,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
    mode: int = 0o644,
) -> None:
    """Replace ``path`` with whatever ``write_fn`` writes.

    The content goes to a sibling temp file that is flushed to disk and then
    renamed over ``path``, all under the exclusive sidecar lock. If
    ``write_fn`` raises, ``path`` is untouched and the temp file is removed.

    Args:
        path: Target file; missing parent directories are created.
        write_fn: Receives the open temp file.
        encoding: Text encoding of the temp file.
        mode: Permission bits of the final file.
    """
    path = Path(path)
    ensure_parent_dir(path)

    tmp_path: Optional[Path] = None
    try:
        with file_lock(path):
            with tempfile.NamedTemporaryFile(
                "w",
                encoding=encoding,
                dir=str(path.parent),
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = Path(f.name)
                write_fn(f)
                f.flush()
                os.fsync(f.fileno())

            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
            tmp_path = None
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)


__all__ = ["ensure_parent_dir", "ensure_directory", "atomic_write", "file_lock", "lock_path_for"]
