"""Test the target registry cache."""

from __future__ import annotations

import pytest

from tests.fakes import InMemoryTargetStore, make_target
from wanwatch.monitoring.targets import DEFAULT_TARGETS, TargetRegistry


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_load_targets_orders_by_priority() -> None:
    """Targets are returned in priority order."""
    store = InMemoryTargetStore(
        [make_target("c", priority=30), make_target("a", priority=1), make_target("b", priority=2)]
    )
    registry = TargetRegistry(store)

    targets = await registry.load_targets()

    assert [t.address for t in targets] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_load_targets_is_cached_within_window() -> None:
    """Loads within the cache window reuse the previous list."""
    clock = _Clock()
    store = InMemoryTargetStore([make_target("a")])
    registry = TargetRegistry(store, cache_seconds=300, clock=clock)

    await registry.load_targets()
    store.targets.append(make_target("b"))
    clock.now += 299
    targets = await registry.load_targets()

    assert store.loads == 1
    assert [t.address for t in targets] == ["a"]


@pytest.mark.asyncio
async def test_load_targets_reloads_after_window() -> None:
    """An expired cache triggers a reload."""
    clock = _Clock()
    store = InMemoryTargetStore([make_target("a")])
    registry = TargetRegistry(store, cache_seconds=300, clock=clock)

    await registry.load_targets()
    store.targets.append(make_target("b"))
    clock.now += 300
    targets = await registry.load_targets()

    assert store.loads == 2
    assert [t.address for t in targets] == ["a", "b"]


@pytest.mark.asyncio
async def test_refresh_bypasses_cache() -> None:
    """Refresh always hits the store."""
    store = InMemoryTargetStore([make_target("a")])
    registry = TargetRegistry(store)

    await registry.load_targets()
    store.targets = [make_target("z")]
    refreshed = await registry.refresh()
    cached = await registry.load_targets()

    assert [t.address for t in refreshed] == ["z"]
    assert cached == refreshed
    assert store.loads == 2


@pytest.mark.asyncio
async def test_invalidate_forces_reload_on_next_load() -> None:
    """Invalidating the cache forces the next load to hit the store."""
    store = InMemoryTargetStore([make_target("a")])
    registry = TargetRegistry(store)

    await registry.load_targets()
    registry.invalidate()
    await registry.load_targets()

    assert store.loads == 2


def test_default_targets_have_unique_addresses_and_priorities() -> None:
    """The default target list has no duplicate addresses or priorities."""
    assert len({t.address for t in DEFAULT_TARGETS}) == len(DEFAULT_TARGETS)
    assert len({t.priority for t in DEFAULT_TARGETS}) == len(DEFAULT_TARGETS)
