"""Text or JSON output for CLI commands.

Results go to stdout; errors go to stderr in the same mode as results.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from cnd.core.exceptions import CndError


class OutputFormatter:
    """Prints command results as human text or, with ``--json``, one JSON document."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def _dump(self, data: Any, stream=None) -> None:
        print(json.dumps(data, indent=self.indent, default=str), file=stream or sys.stdout)

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        """Print ``message``, or ``{"status": status, **data}`` in JSON mode."""
        if self.json_mode:
            self._dump({"status": status, **data})
        else:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None, *, error_code: str = "error") -> None:
        """Report ``error`` on stderr.

        In JSON mode the payload carries ``error_code`` and, for cnd errors,
        their context (key, state file path, ...).
        """
        msg = message or str(error)
        if not self.json_mode:
            print(f"Error: {msg}", file=sys.stderr)
            return
        payload: Dict[str, Any] = {"error": error_code, "message": msg}
        if isinstance(error, CndError) and error.context:
            payload["context"] = error.context
        self._dump(payload, sys.stderr)

    def json_output(self, data: Any) -> None:
        self._dump(data)

    def text(self, message: str) -> None:
        print(message)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


__all__ = ["OutputFormatter"]
