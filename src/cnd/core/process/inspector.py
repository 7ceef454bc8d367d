"""
Process liveness checks backed by psutil.

A sync daemon records its PID in a pid file inside the session folder; the
session is only trusted while that PID belongs to a running process.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import psutil

logger = logging.getLogger(__name__)


def is_process_alive(pid: int) -> bool:
    """Check if a process is alive by PID.

    Zombies count as dead: they hold a PID but will never sync again.
    """
    if pid <= 0:
        return False
    try:
        proc = psutil.Process(pid)
        return proc.status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied:
        # Permission denied implies the process exists but is protected
        return True


def read_pid_file(path: Path) -> Optional[int]:
    """Return the first integer found in ``path``, or None.

    Missing, unreadable or garbled pid files all read as "no pid".
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Could not read pid file %s: %s", path, e)
        return None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        try:
            return int(line)
        except ValueError:
            logger.debug("Ignoring garbled pid file %s: %r", path, line)
            return None
    return None


__all__ = ["is_process_alive", "read_pid_file"]
