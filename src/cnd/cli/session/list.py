"""
cnd session list command.

SUMMARY: List active development sessions
"""
from __future__ import annotations

import argparse

from cnd.cli import OutputFormatter, add_json_flag, get_registry
from cnd.core.exceptions import CndError
from cnd.core.session import reconcile

SUMMARY = "List active development sessions"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--keep-stale",
        action="store_true",
        help="Do not evict sessions whose sync daemon is gone",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    """List sessions, evicting stale ones first unless told not to."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        registry = get_registry()
        evicted = [] if args.keep_stale else reconcile(registry)
        sessions = registry.all()
    except CndError as e:
        formatter.error(e, error_code="list_error")
        return 1

    if formatter.json_mode:
        formatter.json_output(
            {
                "sessions": [
                    {"key": key, **entry.to_dict(), "running": entry.is_running}
                    for key, entry in sorted(sessions.items())
                ],
                "count": len(sessions),
                "evicted": evicted,
            }
        )
        return 0

    if not sessions:
        formatter.text("No active sessions.")
        return 0

    for key, entry in sorted(sessions.items()):
        status = entry.sync_endpoint if entry.is_running else "stopped"
        formatter.text(f"{key}\t{entry.folder}\t{status}")
    return 0
