"""
cnd session delete command.

SUMMARY: Forget a development session
"""
from __future__ import annotations

import argparse

from cnd.cli import OutputFormatter, add_dev_flags, add_json_flag, get_registry, load_dev, resolve_namespace
from cnd.core.exceptions import CndError
from cnd.core.session import SessionKey

SUMMARY = "Forget a development session"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--key",
        default=None,
        help="Key exactly as stored in the state file; overrides --file/--namespace",
    )
    add_dev_flags(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Delete by ``--key`` or by the dev environment the manifest names."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        registry = get_registry()
        if args.key:
            # Stored keys are matched verbatim so hand-edited or malformed
            # entries can still be removed.
            key = args.key
            registry.get_by_key(key)
            registry.delete_by_key(key)
        else:
            dev = load_dev(args)
            namespace = resolve_namespace(args)
            key = str(SessionKey.for_dev(namespace, dev))
            registry.delete(namespace, dev)
    except CndError as e:
        formatter.error(e, error_code="delete_error")
        return 1

    formatter.success({"key": key}, f"Deleted {key}")
    return 0
