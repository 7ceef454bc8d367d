"""
cnd session cleanup_stale command.

SUMMARY: Remove sessions whose folder or sync daemon is gone
"""
from __future__ import annotations

import argparse

from cnd.cli import OutputFormatter, add_dry_run_flag, add_json_flag, get_registry
from cnd.core.exceptions import CndError
from cnd.core.session import find_stale, reconcile

SUMMARY = "Remove sessions whose folder or sync daemon is gone"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_dry_run_flag(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        registry = get_registry()
        if args.dry_run:
            stale = find_stale(registry)
        else:
            stale = reconcile(registry)
    except CndError as e:
        formatter.error(e, error_code="cleanup_stale_error")
        return 1

    if formatter.json_mode:
        formatter.json_output({"stale": stale, "count": len(stale), "dry_run": bool(args.dry_run)})
        return 0

    if not stale:
        formatter.text("No stale sessions detected.")
        return 0

    if args.dry_run:
        formatter.text("Stale sessions (dry-run, would be removed):")
    else:
        formatter.text("Removed stale sessions:")
    for key in stale:
        formatter.text(f"  - {key}")
    formatter.text("")
    formatter.text(f"Total: {len(stale)} session(s)")
    return 0
