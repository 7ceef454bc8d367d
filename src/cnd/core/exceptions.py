from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping


class CndError(Exception):
    """Base exception for cnd."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(CndError, ValueError):
    """Raised when the merged configuration is invalid."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        CndError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class ManifestError(CndError, ValueError):
    """Raised when a dev manifest cannot be read or is incomplete."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        CndError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class StoreError(CndError):
    """Base class for failures reading or writing the session state file."""

    def __init__(self, message: str, *, path: Path | str, context: Mapping[str, Any] | None = None) -> None:
        ctx = dict(context or {})
        ctx["path"] = str(path)
        super().__init__(message, context=ctx)
        self.path = Path(path)


class StoreUnreadableError(StoreError):
    """The state file exists but could not be read."""


class StoreCorruptError(StoreError):
    """The state file was read but does not hold a valid registry document."""


class StoreWriteError(StoreError):
    """The state file could not be written."""


class AlreadyRunningError(CndError):
    """Raised when a session for the same workload is already syncing."""

    def __init__(self, key: str, *, endpoint: str = "") -> None:
        ctx: Dict[str, Any] = {"key": key}
        if endpoint:
            ctx["syncEndpoint"] = endpoint
        super().__init__(f"a cnd up command is already running for '{key}'", context=ctx)
        self.key = key


class SessionNotFoundError(CndError, LookupError):
    """Raised when no registry entry exists for a workload."""

    def __init__(self, key: str) -> None:
        message = f"there aren't any active cloud native development environments available for '{key}'"
        CndError.__init__(self, message, context={"key": key})
        LookupError.__init__(self, message)
        self.key = key


class MalformedKeyError(CndError, ValueError):
    """Raised when a stored session key cannot be split into its parts."""

    def __init__(self, key: str, *, state_path: Path | str | None = None) -> None:
        if state_path is not None:
            message = f"invalid state file, please remove {key} from {state_path} manually and try again"
        else:
            message = f"invalid session key '{key}': expected namespace/deployment/container"
        ctx: Dict[str, Any] = {"key": key}
        if state_path is not None:
            ctx["path"] = str(state_path)
        CndError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)
        self.key = key


__all__ = [
    "CndError",
    "ConfigError",
    "ManifestError",
    "StoreError",
    "StoreUnreadableError",
    "StoreCorruptError",
    "StoreWriteError",
    "AlreadyRunningError",
    "SessionNotFoundError",
    "MalformedKeyError",
]
