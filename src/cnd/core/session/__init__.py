"""Development session registry.

- key: workload identity (namespace/deployment/container)
- models: persisted entries and the registry document
- store: the YAML state file
- registry: insert/get/stop/delete/all over the state file
- liveness: stale session detection and eviction
- binder: clear a session's endpoint when its owning operation ends
"""
from __future__ import annotations

from .binder import WaitGroup, bind, insert_and_bind
from .key import SessionKey
from .liveness import find_stale, reconcile, remove_if_stale, syncthing_exists
from .models import STATE_VERSION, RegistryDocument, SessionEntry
from .registry import SessionRegistry
from .store import StateStore

__all__ = [
    "STATE_VERSION",
    "RegistryDocument",
    "SessionEntry",
    "SessionKey",
    "SessionRegistry",
    "StateStore",
    "WaitGroup",
    "bind",
    "insert_and_bind",
    "find_stale",
    "reconcile",
    "remove_if_stale",
    "syncthing_exists",
]
