"""Path resolution for the cnd home directory and files beneath it."""
from __future__ import annotations

from .user import (
    DEFAULT_HOME_DIR,
    HOME_ENV_VAR,
    get_cnd_home,
    resolve_kubeconfig_path,
)

__all__ = [
    "DEFAULT_HOME_DIR",
    "HOME_ENV_VAR",
    "get_cnd_home",
    "resolve_kubeconfig_path",
]
