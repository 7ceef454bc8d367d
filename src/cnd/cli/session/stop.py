"""
cnd session stop command.

SUMMARY: Mark the session as no longer syncing
"""
from __future__ import annotations

import argparse

from cnd.cli import OutputFormatter, add_dev_flags, add_json_flag, get_registry, load_dev, resolve_namespace
from cnd.core.exceptions import CndError
from cnd.core.session import SessionKey

SUMMARY = "Mark the session as no longer syncing"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_dev_flags(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        dev = load_dev(args)
        namespace = resolve_namespace(args)
        get_registry().stop(namespace, dev)
    except CndError as e:
        formatter.error(e, error_code="stop_error")
        return 1

    key = str(SessionKey.for_dev(namespace, dev))
    formatter.success({"key": key}, f"Stopped {key}")
    return 0
