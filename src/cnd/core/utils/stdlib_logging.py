from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from cnd.core.utils.io import ensure_directory

LOGGER_NAME = "cnd"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LEVEL_ALIASES = {
    "warn": "WARNING",
}

_STREAM_HANDLER: logging.Handler | None = None
_FILE_HANDLER: logging.Handler | None = None
_CONFIGURED_LOG_PATH: str | None = None


def level_from_name(name: str) -> int:
    """Map ``debug/info/warn/error`` (any case) to a logging level."""
    key = (name or "").strip().lower()
    upper = _LEVEL_ALIASES.get(key, key.upper())
    level = logging.getLevelName(upper)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: str = "warn", *, log_path: Optional[Path] = None) -> None:
    """Configure the ``cnd`` logger.

    Installs one stderr handler and, when ``log_path`` is given, one file
    handler. Idempotent per-process: calling again only adjusts levels and
    swaps the file handler when the path changes.
    """
    global _STREAM_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH

    lvl = level_from_name(level)
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(lvl)
    root.propagate = False
    fmt = logging.Formatter(LOG_FORMAT)

    if _STREAM_HANDLER is None:
        _STREAM_HANDLER = logging.StreamHandler(sys.stderr)
        _STREAM_HANDLER.setFormatter(fmt)
        root.addHandler(_STREAM_HANDLER)
    _STREAM_HANDLER.setLevel(lvl)

    resolved = str(Path(log_path).absolute()) if log_path is not None else None
    if resolved == _CONFIGURED_LOG_PATH:
        if _FILE_HANDLER is not None:
            _FILE_HANDLER.setLevel(lvl)
        return

    # Replace the installed file handler when switching paths.
    if _FILE_HANDLER is not None:
        root.removeHandler(_FILE_HANDLER)
        _FILE_HANDLER.close()
        _FILE_HANDLER = None

    if resolved is not None:
        ensure_directory(Path(resolved).parent)
        fh = logging.FileHandler(resolved, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(fmt)
        root.addHandler(fh)
        _FILE_HANDLER = fh

    _CONFIGURED_LOG_PATH = resolved


def reset_logging_for_tests() -> None:
    """Test-only: drop the handlers installed by :func:`configure_logging`."""
    global _STREAM_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH
    root = logging.getLogger(LOGGER_NAME)
    for h in (_STREAM_HANDLER, _FILE_HANDLER):
        if h is not None:
            root.removeHandler(h)
            h.close()
    root.propagate = True
    root.setLevel(logging.NOTSET)
    _STREAM_HANDLER = None
    _FILE_HANDLER = None
    _CONFIGURED_LOG_PATH = None


__all__ = ["configure_logging", "level_from_name", "reset_logging_for_tests", "LOGGER_NAME"]
