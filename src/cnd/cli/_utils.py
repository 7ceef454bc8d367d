"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
from pathlib import Path

from cnd.core.config import get_config
from cnd.core.kubeconfig import current_namespace
from cnd.core.model import Dev, load_manifest
from cnd.core.session import SessionRegistry
from cnd.core.utils.paths import resolve_kubeconfig_path


def get_registry() -> SessionRegistry:
    return SessionRegistry.from_config(get_config())


def load_dev(args: argparse.Namespace) -> Dev:
    """Load the manifest named by ``--file`` (default from configuration)."""
    manifest = getattr(args, "manifest", None) or get_config().manifest_filename
    return load_manifest(Path(manifest))


def resolve_namespace(args: argparse.Namespace) -> str:
    """``--namespace`` if given, else the current kubeconfig namespace."""
    namespace = getattr(args, "namespace", None)
    if namespace:
        return str(namespace)
    cfg = get_config()
    return current_namespace(resolve_kubeconfig_path(cfg.home, cfg.kubeconfig_filename))


__all__ = ["get_registry", "load_dev", "resolve_namespace"]
