"""Layered options: the public face of configuration resolution.

Sources are added in three groups plus the built-in defaults. For a
terminal field the first defining source wins, in this order:

1. overrides (first added first)
2. primary sources (last added first)
3. fallback sources (first added first)
4. the built-in default source, when enabled

Nested mappings merge across every group. Resolution runs either
blocking (:meth:`Options.load_sync`) or concurrently
(:meth:`Options.load`); both produce the same tree.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from cardcreatr.core.options.context import ContextLike, DirectoryContext, as_context
from cardcreatr.core.options.fields import RawSource
from cardcreatr.core.options.registry import ABSENT, CompletionRegistry, Listener
from cardcreatr.core.options.resolver import (
    AsyncExecutor,
    Source,
    SyncExecutor,
    MISSING,
    consume,
    lookup,
)
from cardcreatr.data import get_data_path, read_yaml

logger = logging.getLogger(__name__)


def default_source() -> Source:
    """The built-in default source (read once, shared read-only)."""
    return Source(read_yaml("config", "defaults.yaml"), DirectoryContext(get_data_path("config")))


class Options:
    """Holds layered sources and the tree resolved from them."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._overrides: List[Source] = []
        self._primary: List[Source] = []
        self._fallback: List[Source] = []
        self._use_defaults = False
        self._registry = CompletionRegistry()

    def add_override(self, source: RawSource, context: ContextLike = None) -> "Options":
        self._overrides.append(Source(source, as_context(context)))
        return self

    def add_primary(self, source: RawSource, context: ContextLike = None) -> "Options":
        """Add a primary source; later primaries take precedence over earlier ones.

        ``context`` is a base directory for relative paths named in the
        source, or a function that reads a name and returns bytes.
        """
        self._primary.insert(0, Source(source, as_context(context)))
        return self

    def add_fallback(self, source: RawSource, context: ContextLike = None) -> "Options":
        self._fallback.append(Source(source, as_context(context)))
        return self

    def add_default_fallback(self) -> "Options":
        """Enable the built-in defaults as the lowest-priority source."""
        self._use_defaults = True
        return self

    @property
    def sources(self) -> List[Source]:
        """All sources, highest priority first."""
        ordered = [*self._overrides, *self._primary, *self._fallback]
        if self._use_defaults:
            ordered.append(default_source())
        return ordered

    def load_sync(self) -> "Options":
        """Resolve all sources with blocking reads."""
        logger.debug("Resolving %d source(s) synchronously", len(self.sources))
        tree: Dict[str, Any] = {}
        SyncExecutor().run(consume(tree, "", self.sources))
        self._data = tree
        return self

    async def load(self) -> "Options":
        """Resolve all sources concurrently.

        Listeners registered through :meth:`once_loaded` fire as their paths
        complete; any left over when resolution ends (typically after an
        error) receive ``ABSENT``. On error the tree is left unchanged.
        """
        logger.debug("Resolving %d source(s) concurrently", len(self.sources))
        tree: Dict[str, Any] = {}
        try:
            await AsyncExecutor(self._registry).run(consume(tree, "", self.sources))
        finally:
            self._registry.drain()
        self._data = tree
        return self

    def get(self, address: str, default: Any = MISSING) -> Any:
        """Value at ``address`` (``"/viewports/page/width"``).

        Raises:
            FieldNotFound: If any segment is missing and no ``default`` is given.
        """
        return lookup(self._data, address, default)

    def to_dict(self) -> Dict[str, Any]:
        return self._data

    def once_loaded(self, address: str, callback: Listener) -> None:
        """Call ``callback(value)`` as soon as ``address`` resolves during :meth:`load`.

        Registered between loads, the callback waits for the next :meth:`load`.
        """
        self._registry.listen(address, callback)

    def wait_loaded(self, address: str) -> "asyncio.Future[Any]":
        """Future for the value at ``address``; ``ABSENT`` if it never resolves.

        Must be called from a running event loop. The listener is registered
        immediately, before the future is awaited.
        """
        return self._registry.wait(address)


__all__ = ["ABSENT", "Options", "default_source"]
