"""
cnd analytics command.

SUMMARY: Enable or disable anonymous usage analytics
"""
from __future__ import annotations

import argparse

from cnd.cli import OutputFormatter, add_json_flag
from cnd.core import analytics

SUMMARY = "Enable or disable anonymous usage analytics"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--enable", action="store_true", help="Send anonymous usage events")
    group.add_argument("--disable", action="store_true", help="Stop sending anonymous usage events")
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        if args.enable:
            analytics.enable()
        elif args.disable:
            analytics.disable()
    except OSError as e:
        formatter.error(e, error_code="analytics_error")
        return 1

    enabled = analytics.is_enabled()
    formatter.success({"enabled": enabled}, f"Analytics are {'enabled' if enabled else 'disabled'}")
    return 0
