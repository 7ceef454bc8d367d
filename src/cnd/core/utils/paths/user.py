"""cnd home directory resolution.

The home directory (default: ``~/.cnd``) holds the session state file, the
per-workload session folders and the optional user ``config.yaml``.

Precedence (highest to lowest):
1. Environment variable: CND_HOME
2. Environment variable: CND_paths__home_dir
3. Bundled defaults: cnd.data/config/defaults.yaml (paths.home_dir)
4. Hardcoded fallback: ".cnd"

The directory is resolved relative to the user's home directory unless an
absolute path is provided. It cannot come from the user ``config.yaml``
because that file lives inside it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from cnd.data import read_yaml as read_data_yaml

logger = logging.getLogger(__name__)

DEFAULT_HOME_DIR = ".cnd"
HOME_ENV_VAR = "CND_HOME"


def _resolve_home_from_configs() -> str:
    for var in (HOME_ENV_VAR, "CND_paths__home_dir"):
        env_override = os.environ.get(var)
        if isinstance(env_override, str) and env_override.strip():
            return env_override.strip()

    defaults = read_data_yaml("config", "defaults.yaml") or {}
    paths_section = defaults.get("paths")
    if isinstance(paths_section, dict):
        value = paths_section.get("home_dir")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return DEFAULT_HOME_DIR


def get_cnd_home(*, create: bool = False) -> Path:
    """Return the absolute cnd home directory.

    Relative values are treated as relative to the user's home directory
    (not CWD).
    """
    from cnd.core.utils.io import ensure_directory

    raw = _resolve_home_from_configs()
    p = Path(raw).expanduser()
    if not p.is_absolute():
        p = Path.home() / p

    resolved = p.absolute()
    if create:
        ensure_directory(resolved)
    return resolved


def resolve_kubeconfig_path(home: Path | None = None, filename: str = "kubeconfig") -> Path:
    """Return the kubeconfig to hand to the cluster client.

    A kubeconfig dropped into the cnd home wins over the user's default
    ``~/.kube/config``.
    """
    base = home if home is not None else get_cnd_home()
    candidate = Path(base) / filename
    if candidate.exists():
        return candidate
    logger.debug("%s not found, using the default kubeconfig", candidate)
    return Path.home() / ".kube" / "config"


__all__ = [
    "DEFAULT_HOME_DIR",
    "HOME_ENV_VAR",
    "get_cnd_home",
    "resolve_kubeconfig_path",
]
