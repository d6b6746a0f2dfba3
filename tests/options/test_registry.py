from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from cardcreatr.core.exceptions import AssetLoadError
from cardcreatr.core.options import ABSENT, CompletionRegistry, Options


def test_listeners_fire_in_registration_order() -> None:
    registry = CompletionRegistry()
    calls = []
    registry.listen("/a", lambda v: calls.append(("first", v)))
    registry.listen("/a", lambda v: calls.append(("second", v)))
    registry.signal("/a", 1)
    assert calls == [("first", 1), ("second", 1)]
    assert registry.is_resolved("/a")


def test_listen_after_resolution_fires_without_loop() -> None:
    registry = CompletionRegistry()
    registry.signal("/a", "done")
    calls = []
    registry.listen("/a", calls.append)
    assert calls == ["done"]


def test_drain_releases_pending_listeners() -> None:
    registry = CompletionRegistry()
    calls = []
    registry.listen("/never", calls.append)
    registry.drain()
    assert calls == [ABSENT]
    assert not ABSENT
    registry.drain()
    assert calls == [ABSENT]


def test_wait_resolves_after_signal() -> None:
    async def scenario():
        registry = CompletionRegistry()
        future = registry.wait("/x")
        registry.signal("/x", 5)
        return await future

    assert asyncio.run(scenario()) == 5


def test_once_loaded_during_load(asset_dir: Path) -> None:
    seen = {}

    async def scenario():
        opts = Options().add_primary(
            {"title": "Hello", "art (img)": "art.png", "nested": {"n (uint)": "2"}}, asset_dir
        )
        opts.once_loaded("/title", lambda v: seen.setdefault("title", v))
        opts.once_loaded("/nested", lambda v: seen.setdefault("nested", dict(v)))
        opts.once_loaded("/art", lambda v: seen.setdefault("art", v.dims.width))
        await opts.load()

    asyncio.run(scenario())
    assert seen == {"title": "Hello", "nested": {"n": 2}, "art": 20}


def test_wait_loaded_for_missing_path_gets_absent() -> None:
    async def scenario():
        opts = Options().add_primary({"title": "x"})
        waiting = opts.wait_loaded("/missing")
        await opts.load()
        return await waiting

    assert asyncio.run(scenario()) is ABSENT


def test_listeners_drained_when_load_fails(tmp_path: Path) -> None:
    async def scenario():
        opts = Options().add_primary({"notes (path)": "nope.txt", "title": "x"}, tmp_path)
        waiting = opts.wait_loaded("/notes")
        with pytest.raises(AssetLoadError):
            await opts.load()
        return await waiting

    assert asyncio.run(scenario()) is ABSENT


def test_failing_listener_is_isolated(caplog) -> None:
    registry = CompletionRegistry()
    calls = []

    def broken(value):
        raise RuntimeError("listener bug")

    registry.listen("/a", broken)
    registry.listen("/a", calls.append)
    registry.signal("/a", 1)
    registry.listen("/never", broken)
    registry.drain()
    assert calls == [1]
    assert caplog.text.count("Listener for") == 2


def test_failing_listener_does_not_fail_load() -> None:
    seen = []

    def broken(value):
        raise RuntimeError("listener bug")

    async def scenario():
        opts = Options().add_primary({"a": 1, "b": {"c": 2}})
        opts.once_loaded("/a", broken)
        opts.once_loaded("/a", seen.append)
        waiting = opts.wait_loaded("/b")
        await opts.load()
        return dict(await waiting)

    assert asyncio.run(scenario()) == {"c": 2}
    assert seen == [1]


def test_second_load_delivers_fresh_values() -> None:
    async def scenario():
        opts = Options().add_primary({"a": 1})
        await opts.load()
        opts.add_override({"a": 5})
        waiting = opts.wait_loaded("/a")
        await opts.load()
        return await waiting

    assert asyncio.run(scenario()) == 5


def test_drain_forgets_resolved_values() -> None:
    registry = CompletionRegistry()
    registry.signal("/a", 1)
    registry.drain()
    assert not registry.is_resolved("/a")
    calls = []
    registry.listen("/a", calls.append)
    assert calls == []
    registry.signal("/a", 2)
    assert calls == [2]
