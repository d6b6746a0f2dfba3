"""
Card Creatr bundle init command.

SUMMARY: Create a starter bundle

Writes a new *.ccsb bundle with a starter config, template, field
definitions and one sample card.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from cardcreatr.cli import OutputFormatter, add_json_flag
from cardcreatr.core.defaults import create_starter_bundle

SUMMARY = "Create a starter bundle"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("file", help="Path of the *.ccsb bundle to create")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing file",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    path = Path(args.file)
    if path.exists() and not args.force:
        formatter.error(FileExistsError(str(path)), f"{path} already exists (use --force to overwrite)")
        return 1

    create_starter_bundle(path)
    formatter.success({"bundle": str(path)}, f"Created {path}")
    return 0
