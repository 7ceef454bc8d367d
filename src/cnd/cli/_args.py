"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_dry_run_flag(parser: argparse.ArgumentParser) -> None:
    """Add --dry-run flag."""
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without making changes",
    )


def add_dev_flags(parser: argparse.ArgumentParser) -> None:
    """Add the flags that select a dev environment.

    ``--file`` points at the manifest naming the deployment and container;
    ``--namespace`` overrides the kubeconfig's current namespace.
    """
    parser.add_argument(
        "--file",
        "-f",
        dest="manifest",
        default=None,
        help="path to the manifest file (default: cnd.yml)",
    )
    parser.add_argument(
        "--namespace",
        "-n",
        default=None,
        help="namespace of the deployment (default: current kubeconfig namespace)",
    )


__all__ = ["add_json_flag", "add_dry_run_flag", "add_dev_flags"]
