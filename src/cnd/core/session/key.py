"""Workload identity used as the registry key."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from cnd.core.exceptions import MalformedKeyError

if TYPE_CHECKING:
    from cnd.core.model import Dev

SEPARATOR = "/"


@dataclass(frozen=True)
class SessionKey:
    """``(namespace, deployment, container)``, stored as ``ns/deployment/container``."""

    namespace: str
    deployment: str
    container: str = ""

    @classmethod
    def for_dev(cls, namespace: str, dev: "Dev") -> "SessionKey":
        return cls(namespace=namespace, deployment=dev.deployment, container=dev.container)

    @classmethod
    def parse(cls, raw: str, *, state_path: Optional[Path] = None) -> "SessionKey":
        """Split a stored key back into its parts.

        Anything after the deployment segment is the container name. Fewer
        than two segments, or an empty namespace or deployment, means the
        state file was edited by hand or corrupted.
        """
        parts = str(raw).split(SEPARATOR)
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise MalformedKeyError(str(raw), state_path=state_path)
        return cls(namespace=parts[0], deployment=parts[1], container=SEPARATOR.join(parts[2:]))

    def __str__(self) -> str:
        return f"{self.namespace}{SEPARATOR}{self.deployment}{SEPARATOR}{self.container}"

    def session_folder(self, home: Path) -> Path:
        """Local working folder the sync daemon uses for this workload."""
        return Path(home) / self.namespace / self.deployment


__all__ = ["SessionKey", "SEPARATOR"]
