"""Session registry: the CRUD protocol over the state file.

Every operation reloads the document from disk, applies its change and
writes the whole document back. Operations on the same state file are
serialized behind one process-wide mutex; nothing protects against a second
process writing the file at the same time.
"""
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, Optional

from cnd.core.exceptions import AlreadyRunningError, SessionNotFoundError, StoreError
from cnd.core.model import Dev

from . import liveness
from .key import SessionKey
from .models import SessionEntry
from .store import StateStore

logger = logging.getLogger(__name__)

LivenessCheck = Callable[[Path], bool]

_THREAD_MUTEXES: dict[str, threading.RLock] = {}
_THREAD_MUTEXES_GUARD = threading.Lock()


def _registry_mutex(path: Path) -> threading.RLock:
    key = str(Path(path).absolute())
    with _THREAD_MUTEXES_GUARD:
        lock = _THREAD_MUTEXES.get(key)
        if lock is None:
            lock = _THREAD_MUTEXES.setdefault(key, threading.RLock())
        return lock


def absolute_folder(folder: str, cwd: Optional[str] = None) -> str:
    """Join a relative ``folder`` onto the working directory.

    Absolute folders are returned untouched.
    """
    if os.path.isabs(folder):
        return folder
    base = cwd if cwd is not None else os.getcwd()
    return os.path.normpath(os.path.join(base, folder))


class SessionRegistry:
    """Active development sessions, keyed by workload.

    Args:
        store: Persistence for the registry document.
        home: cnd home; session folders are derived beneath it.
        liveness_check: Predicate telling whether a sync daemon is running
            for a session folder. Defaults to the pid file check.
    """

    def __init__(
        self,
        store: StateStore,
        *,
        home: Path,
        liveness_check: Optional[LivenessCheck] = None,
    ) -> None:
        self.store = store
        self.home = Path(home)
        self.liveness_check: LivenessCheck = liveness_check or liveness.syncthing_exists
        self._mutex = _registry_mutex(store.path)

    @classmethod
    def from_config(cls, config=None) -> "SessionRegistry":
        """Build the registry for the configured cnd home."""
        from functools import partial

        from cnd.core.config import get_config

        cfg = config or get_config()
        check = partial(liveness.syncthing_exists, pid_filename=cfg.sync_pid_filename)
        return cls(StateStore(cfg.state_path), home=cfg.home, liveness_check=check)

    @property
    def state_path(self) -> Path:
        return self.store.path

    def insert(self, namespace: str, dev: Dev, sync_endpoint: str) -> None:
        """Register ``dev`` as syncing through ``sync_endpoint``.

        Re-inserting an identical entry is a no-op. A stopped entry for the
        same workload is replaced. A running one is a conflict, whatever its
        folder.

        Raises:
            AlreadyRunningError: Another session is syncing this workload.
            StoreError: The state file could not be read or written.
        """
        key = str(SessionKey.for_dev(namespace, dev))
        candidate = SessionEntry(folder=absolute_folder(dev.source), sync_endpoint=sync_endpoint)

        with self._mutex:
            doc = self.store.load()
            existing = doc.entries.get(key)
            if existing is not None:
                if existing == candidate:
                    return
                if existing.is_running:
                    logger.debug("There's a service already running: %s %r", key, existing)
                    raise AlreadyRunningError(key, endpoint=existing.sync_endpoint)

            doc.entries[key] = candidate
            self.store.save(doc)
        logger.debug("Registered %s -> %s (%s)", key, candidate.folder, sync_endpoint or "stopped")

    def get(self, namespace: str, dev: Dev) -> SessionEntry:
        """Return the entry for ``dev``.

        Raises:
            SessionNotFoundError: No entry exists for the workload.
        """
        return self.get_by_key(str(SessionKey.for_dev(namespace, dev)))

    def get_by_key(self, key: str) -> SessionEntry:
        with self._mutex:
            doc = self.store.load()
        entry = doc.entries.get(key)
        if entry is None:
            raise SessionNotFoundError(key)
        return entry

    def stop(self, namespace: str, dev: Dev) -> None:
        """Mark the session as not syncing while keeping it registered."""
        key = str(SessionKey.for_dev(namespace, dev))
        with self._mutex:
            doc = self.store.load()
            entry = doc.entries.get(key)
            if entry is None:
                return
            doc.entries[key] = entry.stopped()
            self.store.save(doc)
        logger.debug("Stopped %s", key)

    def delete(self, namespace: str, dev: Dev) -> None:
        """Forget the session for ``dev``."""
        self.delete_by_key(str(SessionKey.for_dev(namespace, dev)))

    def delete_by_key(self, key: str) -> None:
        with self._mutex:
            doc = self.store.load()
            if key not in doc.entries:
                return
            del doc.entries[key]
            self.store.save(doc)
        logger.debug("Deleted %s", key)

    def all(self) -> Dict[str, SessionEntry]:
        """Return every registered session.

        A state file that cannot be loaded yields an empty mapping: listing
        paths show what they can instead of failing.
        """
        try:
            with self._mutex:
                doc = self.store.load()
        except StoreError as exc:
            logger.warning("Could not load sessions: %s", exc)
            return {}
        return dict(doc.entries)

    def remove_if_stale(self, entry: SessionEntry, key: str) -> bool:
        """Evict ``key`` when its session folder or sync daemon is gone."""
        return liveness.remove_if_stale(self, entry, key)


__all__ = ["SessionRegistry", "LivenessCheck", "absolute_folder"]
