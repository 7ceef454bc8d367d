"""Persisted session registry records."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict

STATE_VERSION = "1.0"


@dataclass(frozen=True)
class SessionEntry:
    """Where a session syncs from and which daemon is syncing it.

    An empty ``sync_endpoint`` marks a stopped session that is still
    remembered.
    """

    folder: str
    sync_endpoint: str = ""

    @property
    def is_running(self) -> bool:
        return bool(self.sync_endpoint)

    def stopped(self) -> "SessionEntry":
        return replace(self, sync_endpoint="")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.folder:
            data["folder"] = self.folder
        if self.sync_endpoint:
            data["syncthing"] = self.sync_endpoint
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionEntry":
        return cls(
            folder=str(data.get("folder") or ""),
            sync_endpoint=str(data.get("syncthing") or ""),
        )


@dataclass
class RegistryDocument:
    """Root of the state file: a schema version and every known session."""

    version: str = STATE_VERSION
    entries: Dict[str, SessionEntry] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "RegistryDocument":
        return cls(version=STATE_VERSION, entries={})

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"version": self.version}
        if self.entries:
            data["services"] = {key: entry.to_dict() for key, entry in self.entries.items()}
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryDocument":
        services = data.get("services") or {}
        return cls(
            version=str(data.get("version") or STATE_VERSION),
            entries={str(key): SessionEntry.from_dict(value or {}) for key, value in services.items()},
        )


__all__ = ["STATE_VERSION", "SessionEntry", "RegistryDocument"]
