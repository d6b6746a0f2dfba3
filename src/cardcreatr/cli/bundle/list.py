"""
Card Creatr bundle list command.

SUMMARY: List the assets stored in a bundle
"""

from __future__ import annotations

import argparse

from cardcreatr.cli import OutputFormatter, add_json_flag
from cardcreatr.core.bundle import CcsbReader

SUMMARY = "List the assets stored in a bundle"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("file", help="Path to the *.ccsb bundle")
    parser.add_argument(
        "--prefix",
        type=str,
        default="",
        help="Only list assets whose name starts with this prefix",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    bundle = CcsbReader(args.file).load()
    assets = bundle.list_assets(lambda name: name.startswith(args.prefix))

    if formatter.json_mode:
        formatter.json_output({"bundle": args.file, "assets": assets})
        return 0
    if not assets:
        formatter.text(f"No assets in {args.file}")
        return 0
    for name in assets:
        formatter.text(name)
    return 0
