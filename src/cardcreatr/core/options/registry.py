"""Completion Signal Registry.

Lets consumers wait for one sub-path of a tree that is still being
resolved concurrently, without waiting for the whole tree. One registry
belongs to one resolution request; nothing here is process-global.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class _Absent:
    """Delivered to listeners whose path never resolved."""

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Any = _Absent()

Listener = Callable[[Any], None]


class CompletionRegistry:
    """Per-path completion listeners, fired in registration order.

    A listener that raises is logged and skipped; it never fails the
    resolution that signalled it or keeps later listeners from running.
    """

    def __init__(self) -> None:
        self._resolved: Dict[str, Any] = {}
        self._listeners: Dict[str, List[Listener]] = {}

    def is_resolved(self, path: str) -> bool:
        return path in self._resolved

    def listen(self, path: str, callback: Listener) -> None:
        """Call ``callback(value)`` once the value at ``path`` is resolved.

        If ``path`` already resolved, the callback runs on the next loop
        iteration (immediately when no event loop is running).
        """
        if path in self._resolved:
            value = self._resolved[path]
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                self._invoke(path, callback, value)
            else:
                loop.call_soon(self._invoke, path, callback, value)
            return
        self._listeners.setdefault(path, []).append(callback)

    def wait(self, path: str) -> "asyncio.Future[Any]":
        """Future for the value at ``path``; resolves to ``ABSENT`` if it never loads."""
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

        def _deliver(value: Any) -> None:
            if not future.done():
                future.set_result(value)

        self.listen(path, _deliver)
        return future

    def signal(self, path: str, value: Any) -> None:
        """Mark ``path`` resolved and fire its queued listeners."""
        self._resolved[path] = value
        for callback in self._listeners.pop(path, []):
            self._invoke(path, callback, value)

    def drain(self) -> None:
        """End the request: fire every listener still queued with ``ABSENT``.

        Resolved values are forgotten, so listeners added afterwards wait
        for the next request instead of seeing stale values.
        """
        self._resolved.clear()
        pending, self._listeners = self._listeners, {}
        for path, callbacks in pending.items():
            logger.debug("Field %s never resolved; releasing %d listener(s)", path, len(callbacks))
            for callback in callbacks:
                self._invoke(path, callback, ABSENT)

    @staticmethod
    def _invoke(path: str, callback: Listener, value: Any) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception("Listener for %s failed", path)


__all__ = ["ABSENT", "CompletionRegistry", "Listener"]
