"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode.

    Args:
        parser: ArgumentParser to add the flag to
    """
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_config_arg(parser: argparse.ArgumentParser) -> None:
    """Add --config/-c for a config file or bundle."""
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to a JSON/YAML config file or a *.ccsb bundle",
    )


def add_output_arg(parser: argparse.ArgumentParser) -> None:
    """Add --output/-o; stdout when omitted."""
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write output to this file instead of stdout",
    )


def add_sync_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--sync",
        action="store_true",
        help="Load with blocking reads instead of concurrently",
    )


__all__ = [
    "add_config_arg",
    "add_json_flag",
    "add_output_arg",
    "add_sync_flag",
]
