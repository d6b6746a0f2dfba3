"""
Card Creatr data resource helpers.

Provides access to bundled resources (the built-in default source, the
placeholder image, template mixins, starter templates and schemas) using
importlib.resources.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a data file or directory.

    Args:
        subpackage: Name of the data subpackage (e.g., "config", "schemas")
        filename: Optional filename within the subpackage

    Returns:
        Absolute path to the file or directory

    Example:
        >>> get_data_path("config", "defaults.yaml")
        PosixPath('/path/to/cardcreatr/data/config/defaults.yaml')
    """
    pkg = resources.files("cardcreatr.data")
    base = Path(str(pkg / subpackage))
    return base / filename if filename else base


@lru_cache(maxsize=64)
def read_yaml(subpackage: str, filename: str) -> dict[str, Any]:
    """
    Read and parse a YAML data file (cached).

    Callers must not mutate the returned mapping.
    """
    path = get_data_path(subpackage, filename)
    return yaml.safe_load(path.read_text(encoding="utf-8"))


@lru_cache(maxsize=16)
def read_bytes(subpackage: str, filename: str) -> bytes:
    """Read a binary data file (cached)."""
    return get_data_path(subpackage, filename).read_bytes()


def read_text(subpackage: str, filename: str) -> str:
    """Read a text data file."""
    path = get_data_path(subpackage, filename)
    return path.read_text(encoding="utf-8")


# Clear caches (useful for testing)
def clear_caches() -> None:
    """Clear all read caches."""
    read_yaml.cache_clear()
    read_bytes.cache_clear()


__all__ = [
    "get_data_path",
    "read_yaml",
    "read_bytes",
    "read_text",
    "clear_caches",
]
