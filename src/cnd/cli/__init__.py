"""
cnd CLI package.

Commands are discovered from subfolders (``session/``) and from
``commands/`` for top-level commands. Each command module exposes
``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter
from ._args import (
    add_dev_flags,
    add_dry_run_flag,
    add_json_flag,
)
from ._utils import (
    get_registry,
    load_dev,
    resolve_namespace,
)

__all__ = [
    "OutputFormatter",
    "add_dev_flags",
    "add_dry_run_flag",
    "add_json_flag",
    "get_registry",
    "load_dev",
    "resolve_namespace",
]
