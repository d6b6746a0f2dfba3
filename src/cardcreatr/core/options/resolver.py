"""Tree Resolver: merge layered sources into one resolved tree.

The merge is written once, as the :func:`consume` generator, and run by
one of two executors:

- :class:`SyncExecutor` performs reads as blocking calls and visits fields
  depth-first in order, stopping at the first error.
- :class:`AsyncExecutor` runs the fields of each level as concurrent tasks
  (nested levels alongside sibling leaves), signals completed paths to a
  :class:`~cardcreatr.core.options.registry.CompletionRegistry`, and on the
  first error cancels the siblings still running and re-raises it.

Merge rules, per level:

1. Parse every source's keys (see :mod:`cardcreatr.core.options.fields`).
2. Visit the union of field names in first-seen order.
3. All sources defining a name must agree on whether it is a nested
   mapping; otherwise :class:`InconsistentNesting`.
4. Nested mappings recurse with every defining source, each keeping its
   own resolution context.
5. Terminal values come from the highest-priority defining source only.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional

from cardcreatr.core.exceptions import AssetLoadError, FieldNotFound, InconsistentNesting
from cardcreatr.core.options.context import ResolutionContext
from cardcreatr.core.options.effects import Effect, Fork, Loaded, ReadBytes, Resolution
from cardcreatr.core.options.fields import (
    ParsedSource,
    RawSource,
    convert_keys_to_fields,
    get_all_field_names,
)
from cardcreatr.core.options.leaf import resolve_leaf
from cardcreatr.core.options.registry import CompletionRegistry

logger = logging.getLogger(__name__)

MISSING = object()


@dataclass(frozen=True)
class Source:
    """One raw mapping level paired with its resolution context."""

    items: RawSource
    context: ResolutionContext


def consume(dest: Dict[str, Any], parent_path: str, sources: List[Source]) -> Resolution:
    """Merge ``sources`` (highest priority first) into ``dest``."""
    parsed = [(convert_keys_to_fields(s.items, parent_path), s.context) for s in sources]
    names = get_all_field_names(fields for fields, _ in parsed)
    yield Fork([_consume_field(dest, parent_path, name, parsed) for name in names])
    return dest


def _consume_field(
    dest: Dict[str, Any],
    parent_path: str,
    name: str,
    parsed: List[tuple[ParsedSource, ResolutionContext]],
) -> Resolution:
    path = f"{parent_path}/{name}"
    defining = [(fields.fields[name], context) for fields, context in parsed if name in fields.fields]

    nested = defining[0][0].is_consumable
    if any(item.is_consumable != nested for item, _ in defining):
        raise InconsistentNesting(path)

    if nested:
        node = dest.get(name)
        if not isinstance(node, dict):
            node = dest[name] = {}
        yield from consume(node, path, [Source(item.value, context) for item, context in defining])
        value = node
    else:
        item, context = defining[0]
        value = yield from resolve_leaf(item, context, path)
        dest[name] = value

    yield Loaded(path, value)
    return value


class SyncExecutor:
    """Runs a resolution with blocking reads, depth-first."""

    def run(self, resolution: Resolution) -> Any:
        value: Any = None
        error: Optional[BaseException] = None
        try:
            while True:
                try:
                    effect = resolution.throw(error) if error is not None else resolution.send(value)
                except StopIteration as stop:
                    return stop.value
                value, error = None, None
                try:
                    value = self._perform(effect)
                except AssetLoadError as exc:
                    if not isinstance(effect, ReadBytes):
                        raise
                    error = exc
        finally:
            resolution.close()

    def _perform(self, effect: Effect) -> Any:
        if isinstance(effect, ReadBytes):
            return effect.context.read(effect.name)
        if isinstance(effect, Fork):
            return [self.run(child) for child in effect.children]
        return None


class AsyncExecutor:
    """Runs a resolution with concurrent sibling fan-out."""

    def __init__(self, registry: Optional[CompletionRegistry] = None) -> None:
        self.registry = registry

    async def run(self, resolution: Resolution) -> Any:
        value: Any = None
        error: Optional[BaseException] = None
        try:
            while True:
                try:
                    effect = resolution.throw(error) if error is not None else resolution.send(value)
                except StopIteration as stop:
                    return stop.value
                value, error = None, None
                try:
                    value = await self._perform(effect)
                except AssetLoadError as exc:
                    if not isinstance(effect, ReadBytes):
                        raise
                    error = exc
        finally:
            resolution.close()

    async def _perform(self, effect: Effect) -> Any:
        if isinstance(effect, ReadBytes):
            return await effect.context.read_async(effect.name)
        if isinstance(effect, Fork):
            return await gather_fail_fast(self.run(child) for child in effect.children)
        if isinstance(effect, Loaded) and self.registry is not None:
            self.registry.signal(effect.path, effect.value)
        return None


async def gather_fail_fast(awaitables: Iterable[Awaitable[Any]]) -> List[Any]:
    """Run ``awaitables`` concurrently; results in input order.

    The first failure (in input order among those finished) cancels the
    rest and is re-raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return []
    try:
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    failed = next(
        (t for t in tasks if t.done() and not t.cancelled() and t.exception() is not None),
        None,
    )
    if failed is None:
        return [task.result() for task in tasks]

    for task in pending:
        task.cancel()
    if pending:
        await asyncio.wait(pending)
    exc = failed.exception()
    assert exc is not None
    raise exc


def lookup(tree: Mapping[str, Any], address: str, default: Any = MISSING) -> Any:
    """Read the value at a slash-delimited ``address`` such as ``/fonts/title``.

    Raises:
        FieldNotFound: If a segment is missing and no ``default`` is given.
    """
    node: Any = tree
    for segment in [s for s in address.split("/") if s]:
        if not isinstance(node, Mapping) or segment not in node:
            if default is MISSING:
                raise FieldNotFound(address)
            return default
        node = node[segment]
    return node


__all__ = [
    "AsyncExecutor",
    "Source",
    "SyncExecutor",
    "consume",
    "gather_fail_fast",
    "lookup",
]
