"""Effects yielded by the resolution generators.

The merge algorithm and the leaf rules are written once as generators.
They never touch the filesystem or the scheduler themselves; instead they
yield one of the effects below and an executor performs it:

- :class:`ReadBytes` is answered with the bytes (or thrown the
  :class:`~cardcreatr.core.exceptions.AssetLoadError`).
- :class:`Fork` is answered with the list of child results, in order.
- :class:`Loaded` is answered with ``None``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generator, List, Union

from cardcreatr.core.options.context import ResolutionContext

Resolution = Generator["Effect", Any, Any]


@dataclass(frozen=True)
class ReadBytes:
    context: ResolutionContext
    name: str


@dataclass(frozen=True)
class Fork:
    """Independent child resolutions; siblings may run concurrently."""

    children: List[Resolution]


@dataclass(frozen=True)
class Loaded:
    """The value at ``path`` is complete."""

    path: str
    value: Any


Effect = Union[ReadBytes, Fork, Loaded]

__all__ = ["Effect", "Fork", "Loaded", "ReadBytes", "Resolution"]
