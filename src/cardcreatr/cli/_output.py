"""Unified CLI output formatting utilities.

Consistent output formatting for all Card Creatr CLI commands, supporting
both JSON and text output modes.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from cardcreatr.core.exceptions import CardCreatrError


class OutputFormatter:
    """Unified output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON; otherwise output text
            indent: JSON indentation level
        """
        self.json_mode = json_mode
        self.indent = indent

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        """Output success result (``data`` in JSON mode, ``message`` otherwise)."""
        if self.json_mode:
            output = {"status": status, **data}
            print(json.dumps(output, indent=self.indent, default=str))
        else:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None) -> None:
        """Output error result to stderr.

        Card Creatr errors carry their own JSON payload.
        """
        msg = message or str(error)
        if self.json_mode:
            if isinstance(error, CardCreatrError):
                output = error.to_json_error()
            else:
                output = {"message": msg, "code": type(error).__name__, "context": {}}
            print(json.dumps({"error": output}, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        print(message)


__all__ = ["OutputFormatter"]
