"""
Card Creatr config show command.

SUMMARY: Show the resolved configuration

Displays the tree merged from the config file (or bundle) and the built-in
defaults. File-backed values are summarized by path, MIME type and size.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Any

from cardcreatr.cli import OutputFormatter, add_config_arg, add_json_flag, add_sync_flag
from cardcreatr.core.options import Asset
from cardcreatr.core.render import ReadAndRender

SUMMARY = "Show the resolved configuration"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_config_arg(parser)
    parser.add_argument(
        "--key",
        type=str,
        default=None,
        help="Address of one value to show (e.g., '/viewports/page')",
    )
    add_sync_flag(parser)
    add_json_flag(parser)


def summarize(value: Any) -> Any:
    """JSON-friendly copy of a resolved tree."""
    if isinstance(value, Asset):
        summary = {"path": value.path, "mimeType": value.mime_type, "size": len(value.data)}
        if value.dims is not None:
            summary["dims"] = [value.dims.width, value.dims.height]
        if value.font is not None:
            summary["font"] = True
        return summary
    if isinstance(value, dict):
        return {k: summarize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [summarize(v) for v in value]
    return value


def _format_value(value: Any, indent: int = 0) -> str:
    """Format a value for text display."""
    prefix = "  " * indent
    if isinstance(value, dict):
        lines = []
        for k, v in value.items():
            formatted = _format_value(v, indent + 1)
            if "\n" in formatted or isinstance(v, dict):
                lines.append(f"{prefix}{k}:")
                lines.append(formatted)
            else:
                lines.append(f"{prefix}{k}: {formatted}")
        return "\n".join(line for line in lines if line)
    if isinstance(value, list):
        if not value:
            return "[]"
        return f"[{', '.join(str(v) for v in value)}]"
    return str(value)


def main(args: argparse.Namespace) -> int:
    """Show configuration - delegates to ReadAndRender."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    pipeline = ReadAndRender(args.config)
    if args.sync:
        options = pipeline.load_config_sync()
    else:
        options = asyncio.run(pipeline.load_config())

    if args.key:
        value = summarize(options.get(args.key))
        if formatter.json_mode:
            formatter.json_output({args.key: value})
        elif isinstance(value, dict):
            formatter.text(f"{args.key}:")
            formatter.text(_format_value(value, indent=1))
        else:
            formatter.text(f"{args.key}: {_format_value(value)}")
        return 0

    tree = summarize(options.to_dict())
    if formatter.json_mode:
        formatter.json_output(tree)
    else:
        formatter.text(_format_value(tree))
    return 0
