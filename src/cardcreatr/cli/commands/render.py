"""
Card Creatr render command.

SUMMARY: Render cards to SVG

Reads a config file or bundle, resolves every card matching the query and
writes one SVG document: a single card, one page of the print layout, or
all pages stacked.
"""
from __future__ import annotations

import argparse

from cardcreatr.cli import (
    OutputFormatter,
    add_config_arg,
    add_json_flag,
    add_output_arg,
    add_sync_flag,
    load_pipeline,
    write_output,
)
from cardcreatr.core.render import FIRST_CARD

SUMMARY = "Render cards to SVG"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_config_arg(parser)
    parser.add_argument("--template", type=str, help="Card template (used when the config names none)")
    parser.add_argument("--data", type=str, help="Card data CSV (used when the config names none)")

    query = parser.add_mutually_exclusive_group()
    query.add_argument("--row", type=int, help="Index of the data row to render (0-based)")
    query.add_argument("--id", type=str, help="Render the row with this 'id'")
    query.add_argument("--title", type=str, help="Render the row with this 'title'")

    parser.add_argument(
        "--page",
        type=int,
        default=FIRST_CARD,
        help="-1: first card only (default); N >= 1: page N of the print layout; -2: all pages",
    )
    parser.add_argument("--quantity", type=int, help="Copies of each card (default: query.multiples)")
    parser.add_argument(
        "--backs",
        action="store_true",
        help="With --page -2, interleave mirrored back pages rendered from backTemplate",
    )
    add_sync_flag(parser)
    add_output_arg(parser)
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Render cards - delegates to ReadAndRender."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    pipeline = load_pipeline(args)
    svg = pipeline.run(page=args.page, quantity=args.quantity, backs=args.backs)

    if formatter.json_mode and not args.output:
        formatter.json_output({"cards": len(pipeline.cards), "svg": svg})
        return 0

    write_output(svg, args.output)
    if args.output:
        formatter.success(
            {"cards": len(pipeline.cards), "output": args.output},
            f"Rendered {len(pipeline.cards)} card(s) to {args.output}",
        )
    return 0
