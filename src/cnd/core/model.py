"""Dev environment descriptor read from a ``cnd.yml`` manifest."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from cnd.core.exceptions import ManifestError
from cnd.core.utils.io import read_yaml


@dataclass(frozen=True)
class Dev:
    """The workload a session attaches to and the local folder it syncs.

    ``source`` is kept as written in the manifest; the registry makes it
    absolute at insert time.
    """

    deployment: str
    container: str = ""
    source: str = "."
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dev":
        if not isinstance(data, dict):
            raise ManifestError(f"manifest must be a mapping, got {type(data).__name__}")

        swap = data.get("swap") or {}
        deployment = swap.get("deployment") if isinstance(swap, dict) else None
        if not isinstance(deployment, dict) or not deployment.get("name"):
            raise ManifestError("manifest is missing swap.deployment.name")

        mount = data.get("mount") or {}
        source = mount.get("source") if isinstance(mount, dict) else None

        return cls(
            deployment=str(deployment["name"]),
            container=str(deployment.get("container") or ""),
            source=str(source or "."),
            name=str(data.get("name") or deployment["name"]),
        )


def load_manifest(path: Path) -> Dev:
    """Read a dev manifest from ``path``."""
    path = Path(path)
    if not path.exists():
        raise ManifestError(f"manifest not found: {path}", context={"path": str(path)})
    try:
        data = read_yaml(path, default=None, raise_on_error=True)
    except Exception as exc:
        raise ManifestError(f"could not read manifest {path}: {exc}", context={"path": str(path)}) from exc
    if data is None:
        raise ManifestError(f"manifest is empty: {path}", context={"path": str(path)})
    try:
        return Dev.from_dict(data)
    except ManifestError as exc:
        raise ManifestError(f"{path}: {exc}", context={"path": str(path)}) from exc


__all__ = ["Dev", "load_manifest"]
