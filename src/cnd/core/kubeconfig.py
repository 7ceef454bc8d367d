"""Minimal kubeconfig reading: which namespace commands default to.

Building a cluster client is left to the caller; cnd only needs the
namespace of the current context to compute session keys.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from cnd.core.utils.io import read_yaml
from cnd.core.utils.paths import resolve_kubeconfig_path

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"


def current_namespace(kubeconfig: Optional[Path] = None) -> str:
    """Namespace of the kubeconfig's current context (``default`` if unset)."""
    path = kubeconfig if kubeconfig is not None else resolve_kubeconfig_path()
    data = read_yaml(path, default={})
    if not isinstance(data, dict):
        logger.debug("Ignoring malformed kubeconfig %s", path)
        return DEFAULT_NAMESPACE

    current = data.get("current-context")
    for item in data.get("contexts") or []:
        if not isinstance(item, dict) or item.get("name") != current:
            continue
        context: Dict[str, Any] = item.get("context") or {}
        namespace = context.get("namespace") if isinstance(context, dict) else None
        if namespace:
            return str(namespace)
    return DEFAULT_NAMESPACE


__all__ = ["DEFAULT_NAMESPACE", "current_namespace"]
