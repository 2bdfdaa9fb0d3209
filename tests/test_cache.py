"""Tests for the in-memory TTL cache."""

import asyncio

import pytest

from club_portal.services.cache import InMemoryCache
from tests.conftest import FakeClock


def test_get_returns_value_until_ttl_elapses() -> None:
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)

    cache.set("users:1", {"name": "Anna"}, ttl_seconds=10)
    clock.advance(9)
    assert cache.get("users:1") == {"name": "Anna"}

    clock.advance(1)
    assert cache.get("users:1") is None
    assert cache.get("users:1", default="missing") == "missing"


def test_expired_entries_are_evicted_on_lookup() -> None:
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    cache.set("a", 1, ttl_seconds=5)
    cache.set("b", 2, ttl_seconds=60)

    clock.advance(30)
    assert len(cache) == 2
    assert not cache.has("a")
    assert len(cache) == 1
    assert cache.has("b")


def test_set_overwrites_value_and_expiry() -> None:
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    cache.set("key", "old", ttl_seconds=1)
    cache.set("key", "new", ttl_seconds=100)

    clock.advance(50)

    assert cache.get("key") == "new"


def test_delete_ignores_missing_keys() -> None:
    cache = InMemoryCache()
    cache.set("key", "value", ttl_seconds=60)

    cache.delete("key")
    cache.delete("key")

    assert not cache.has("key")


def test_delete_by_prefix_removes_only_matching_keys() -> None:
    cache = InMemoryCache()
    for key in ("groups:list:1", "groups:list:2", "groups:7", "sessions:list:1"):
        cache.set(key, key, ttl_seconds=60)

    removed = cache.delete_by_prefix("groups:list:")

    assert removed == 2
    assert cache.has("groups:7")
    assert cache.has("sessions:list:1")
    assert cache.delete_by_prefix("nothing:") == 0


def test_clear_drops_everything() -> None:
    cache = InMemoryCache()
    cache.set("a", 1, ttl_seconds=60)
    cache.set("b", 2, ttl_seconds=60)

    cache.clear()

    assert len(cache) == 0


def test_get_or_set_fetches_once_while_fresh() -> None:
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    calls = 0

    async def fetch() -> str:
        nonlocal calls
        calls += 1
        return f"value-{calls}"

    async def scenario() -> list[str]:
        first = await cache.get_or_set("key", 30, fetch)
        second = await cache.get_or_set("key", 30, fetch)
        clock.advance(30)
        third = await cache.get_or_set("key", 30, fetch)
        return [first, second, third]

    assert asyncio.run(scenario()) == ["value-1", "value-1", "value-2"]
    assert calls == 2


def test_get_or_set_caches_none() -> None:
    cache = InMemoryCache()
    calls = 0

    async def fetch() -> None:
        nonlocal calls
        calls += 1

    async def scenario() -> None:
        await cache.get_or_set("missing", 30, fetch)
        await cache.get_or_set("missing", 30, fetch)

    asyncio.run(scenario())

    assert calls == 1
    assert cache.has("missing")


def test_get_or_set_does_not_cache_failures() -> None:
    cache = InMemoryCache()
    attempts = 0

    async def flaky() -> str:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("database unavailable")
        return "ok"

    with pytest.raises(RuntimeError, match="database unavailable"):
        asyncio.run(cache.get_or_set("key", 30, flaky))
    assert not cache.has("key")

    assert asyncio.run(cache.get_or_set("key", 30, flaky)) == "ok"
    assert attempts == 2


def test_concurrent_get_or_set_shares_one_fetch() -> None:
    cache = InMemoryCache()
    calls = 0

    async def slow_fetch() -> str:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return "shared"

    async def scenario() -> list[str]:
        return await asyncio.gather(
            *(cache.get_or_set("key", 30, slow_fetch) for _ in range(5))
        )

    assert asyncio.run(scenario()) == ["shared"] * 5
    assert calls == 1


def test_concurrent_waiters_see_the_fetch_error() -> None:
    cache = InMemoryCache()

    async def failing_fetch() -> str:
        await asyncio.sleep(0.01)
        raise ValueError("boom")

    async def scenario() -> list[object]:
        return await asyncio.gather(
            *(cache.get_or_set("key", 30, failing_fetch) for _ in range(3)),
            return_exceptions=True,
        )

    results = asyncio.run(scenario())

    assert all(isinstance(result, ValueError) for result in results)
    assert not cache.has("key")


def test_invalidation_during_fetch_keeps_the_old_result_out() -> None:
    cache = InMemoryCache()
    values = iter(["before write", "after write"])

    async def scenario() -> tuple[str, str]:
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_fetch() -> str:
            value = next(values)
            started.set()
            await release.wait()
            return value

        first = asyncio.create_task(cache.get_or_set("groups:list:1", 30, slow_fetch))
        await started.wait()
        cache.delete_by_prefix("groups:list:")
        second = asyncio.create_task(
            cache.get_or_set("groups:list:1", 30, slow_fetch)
        )
        await asyncio.sleep(0)
        release.set()
        return await first, await second

    assert asyncio.run(scenario()) == ("before write", "after write")
    assert cache.get("groups:list:1") == "after write"


def test_clear_during_fetch_leaves_the_cache_empty() -> None:
    cache = InMemoryCache()

    async def scenario() -> str:
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_fetch() -> str:
            started.set()
            await release.wait()
            return "stale"

        task = asyncio.create_task(cache.get_or_set("key", 30, slow_fetch))
        await started.wait()
        cache.clear()
        release.set()
        return await task

    assert asyncio.run(scenario()) == "stale"
    assert len(cache) == 0


def test_waiters_refetch_when_the_fetching_caller_is_cancelled() -> None:
    cache = InMemoryCache()
    calls = 0

    async def scenario() -> list[str]:
        started = asyncio.Event()

        async def slow_fetch() -> str:
            nonlocal calls
            calls += 1
            started.set()
            await asyncio.sleep(0.01)
            return f"value-{calls}"

        owner = asyncio.create_task(cache.get_or_set("key", 30, slow_fetch))
        await started.wait()
        waiters = [
            asyncio.create_task(cache.get_or_set("key", 30, slow_fetch))
            for _ in range(3)
        ]
        await asyncio.sleep(0)
        owner.cancel()

        results = await asyncio.gather(*waiters)
        with pytest.raises(asyncio.CancelledError):
            await owner
        return results

    assert asyncio.run(scenario()) == ["value-2"] * 3
    assert calls == 2
    assert cache.get("key") == "value-2"


def test_cancelled_waiter_does_not_disturb_the_shared_fetch() -> None:
    cache = InMemoryCache()
    calls = 0

    async def scenario() -> tuple[str, str]:
        started = asyncio.Event()

        async def slow_fetch() -> str:
            nonlocal calls
            calls += 1
            started.set()
            await asyncio.sleep(0.01)
            return "shared"

        owner = asyncio.create_task(cache.get_or_set("key", 30, slow_fetch))
        await started.wait()
        quitter = asyncio.create_task(cache.get_or_set("key", 30, slow_fetch))
        other = asyncio.create_task(cache.get_or_set("key", 30, slow_fetch))
        await asyncio.sleep(0)
        quitter.cancel()

        with pytest.raises(asyncio.CancelledError):
            await quitter
        return await owner, await other

    assert asyncio.run(scenario()) == ("shared", "shared")
    assert calls == 1
    assert cache.get("key") == "shared"
