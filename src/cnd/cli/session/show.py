"""
cnd session show command.

SUMMARY: Show the session of the current dev environment
"""
from __future__ import annotations

import argparse

from cnd.cli import OutputFormatter, add_dev_flags, add_json_flag, get_registry, load_dev, resolve_namespace
from cnd.core.exceptions import CndError
from cnd.core.session import SessionKey

SUMMARY = "Show the session of the current dev environment"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_dev_flags(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        dev = load_dev(args)
        namespace = resolve_namespace(args)
        entry = get_registry().get(namespace, dev)
    except CndError as e:
        formatter.error(e, error_code="show_error")
        return 1

    key = str(SessionKey.for_dev(namespace, dev))
    if formatter.json_mode:
        formatter.json_output({"key": key, **entry.to_dict(), "running": entry.is_running})
        return 0

    formatter.text(key)
    formatter.text_kv("folder", entry.folder)
    formatter.text_kv("sync", entry.sync_endpoint or "stopped")
    return 0
