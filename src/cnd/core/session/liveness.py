"""Stale session detection and eviction.

A registry entry is trusted while two things hold for its workload:
the session folder ``<home>/<namespace>/<deployment>`` exists, and the sync
daemon whose PID is recorded in that folder is running. Either one going
away is enough to evict the entry. The folder is derived from the key, not
taken from the entry's ``folder``.

Nothing runs this on a schedule; listing commands call it to keep the state
file honest.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional

from cnd.core.exceptions import MalformedKeyError, StoreError
from cnd.core.process import is_process_alive, read_pid_file

from .key import SessionKey
from .models import SessionEntry

if TYPE_CHECKING:
    from .registry import SessionRegistry

logger = logging.getLogger(__name__)

DEFAULT_PID_FILENAME = "syncthing.pid"


def syncthing_exists(folder: Path, *, pid_filename: str = DEFAULT_PID_FILENAME) -> bool:
    """Whether the sync daemon recorded in ``folder`` is still running."""
    pid_path = Path(folder) / pid_filename
    pid = read_pid_file(pid_path)
    if pid is None:
        return False
    return is_process_alive(pid)


def stale_reason(
    key: str,
    home: Path,
    liveness_check: Callable[[Path], bool],
    *,
    state_path: Optional[Path] = None,
) -> Optional[str]:
    """Return why ``key`` is stale, or None when it is live.

    Raises:
        MalformedKeyError: ``key`` cannot be split into namespace/deployment.
    """
    session_folder = SessionKey.parse(key, state_path=state_path).session_folder(home)
    if not session_folder.exists():
        return f"{session_folder} doesn't exist"
    if not liveness_check(session_folder):
        return f"the sync daemon for {session_folder} is not running anymore"
    return None


def remove_if_stale(registry: "SessionRegistry", entry: SessionEntry, key: str) -> bool:
    """Delete ``key`` from the registry if its session is stale.

    Returns True only when the entry was stale and has been removed. A key
    that cannot be parsed is left alone: guessing could evict a live session.
    """
    try:
        reason = stale_reason(key, registry.home, registry.liveness_check, state_path=registry.state_path)
    except MalformedKeyError as exc:
        logger.info("state is malformed, manual action might be required: %s", exc)
        return False

    if reason is None:
        return False

    logger.debug("%s, removing %s (%s) from state", reason, key, entry.folder)
    try:
        registry.delete_by_key(key)
    except StoreError as exc:
        logger.warning("Could not remove stale session %s: %s", key, exc)
        return False
    return True


def find_stale(registry: "SessionRegistry") -> List[str]:
    """List stale keys without touching the registry."""
    stale: List[str] = []
    for key in sorted(registry.all()):
        try:
            reason = stale_reason(key, registry.home, registry.liveness_check, state_path=registry.state_path)
        except MalformedKeyError as exc:
            logger.info("state is malformed, manual action might be required: %s", exc)
            continue
        if reason is not None:
            stale.append(key)
    return stale


def reconcile(registry: "SessionRegistry") -> List[str]:
    """Evict every stale entry and return the evicted keys."""
    evicted: List[str] = []
    for key, entry in sorted(registry.all().items()):
        if remove_if_stale(registry, entry, key):
            evicted.append(key)
    return evicted


__all__ = [
    "DEFAULT_PID_FILENAME",
    "syncthing_exists",
    "stale_reason",
    "remove_if_stale",
    "find_stale",
    "reconcile",
]
