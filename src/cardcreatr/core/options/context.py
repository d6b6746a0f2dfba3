"""Resolution contexts: how a relative path named in a source becomes bytes.

A context is either a base directory on disk or a custom reader function
(used for sources that live inside a bundle). Both expose the same two
capabilities, ``read`` and ``read_async``, and everything downstream
depends only on those.
"""
from __future__ import annotations

import asyncio
import inspect
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

from cardcreatr.core.exceptions import AssetLoadError

SyncReader = Callable[[str], bytes]
AsyncReader = Callable[[str], Awaitable[bytes]]


class ResolutionContext:
    """Turns a name found in a source into bytes."""

    def locate(self, name: str) -> str:
        """Return the display/lookup path for ``name`` in this context."""
        raise NotImplementedError

    def read(self, name: str) -> bytes:
        raise NotImplementedError

    async def read_async(self, name: str) -> bytes:
        raise NotImplementedError


@dataclass(frozen=True)
class DirectoryContext(ResolutionContext):
    """Relative paths resolve under ``base``."""

    base: Path

    def locate(self, name: str) -> str:
        return os.path.join(str(self.base), name)

    def read(self, name: str) -> bytes:
        path = self.locate(name)
        try:
            return Path(path).read_bytes()
        except OSError as exc:
            raise AssetLoadError(path, exc.strerror or str(exc)) from exc

    async def read_async(self, name: str) -> bytes:
        return await asyncio.to_thread(self.read, name)


@dataclass(frozen=True)
class ReaderContext(ResolutionContext):
    """Names are handed verbatim to custom reader functions.

    ``reader`` serves the blocking path; ``async_reader`` (optional) serves
    the concurrent path. Without an async reader the blocking one runs in a
    worker thread.
    """

    reader: SyncReader
    async_reader: Optional[AsyncReader] = None

    def locate(self, name: str) -> str:
        return name

    def read(self, name: str) -> bytes:
        try:
            data = self.reader(name)
        except AssetLoadError:
            raise
        except Exception as exc:
            raise AssetLoadError(name, str(exc)) from exc
        return _check_bytes(name, data)

    async def read_async(self, name: str) -> bytes:
        if self.async_reader is None:
            return await asyncio.to_thread(self.read, name)
        try:
            data = await self.async_reader(name)
        except AssetLoadError:
            raise
        except Exception as exc:
            raise AssetLoadError(name, str(exc)) from exc
        return _check_bytes(name, data)


def _check_bytes(name: str, data: Any) -> bytes:
    if data is None:
        raise AssetLoadError(name, "file loader function returned None")
    return bytes(data)


ContextLike = Union[ResolutionContext, str, "os.PathLike[str]", SyncReader, None]


def as_context(value: ContextLike) -> ResolutionContext:
    """Normalize what callers pass alongside a source into a context.

    Accepts a context, a directory (``str``/``PathLike``; ``None`` or ``""``
    mean the working directory) or a reader function. A coroutine function
    becomes the async reader; bound methods of objects that also offer a
    ``<name>_async`` twin get both.
    """
    if isinstance(value, ResolutionContext):
        return value
    if value is None or isinstance(value, (str, os.PathLike)):
        return DirectoryContext(Path(value or ""))
    if callable(value):
        if inspect.iscoroutinefunction(value):
            return ReaderContext(reader=_no_sync_reader, async_reader=value)
        twin = _async_twin(value)
        return ReaderContext(reader=value, async_reader=twin)
    raise TypeError(f"Unsupported resolution context: {value!r}")


def _async_twin(fn: Callable[..., Any]) -> Optional[AsyncReader]:
    owner = getattr(fn, "__self__", None)
    name = getattr(fn, "__name__", "")
    if owner is None or not name:
        return None
    twin = getattr(owner, f"{name}_async", None)
    if twin is not None and inspect.iscoroutinefunction(twin):
        return twin
    return None


def _no_sync_reader(name: str) -> bytes:
    raise AssetLoadError(name, "source only supports asynchronous reads")


__all__ = [
    "ResolutionContext",
    "DirectoryContext",
    "ReaderContext",
    "ContextLike",
    "as_context",
]
