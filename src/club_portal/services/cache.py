"""TTL cache used to avoid redundant Supabase round trips."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol, TypeVar

T = TypeVar("T")

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str, default: object | None = None) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: float) -> None:
        """Store a cached value with a TTL in seconds."""

    def has(self, key: str) -> bool:
        """Return whether a live entry exists for the key."""

    def delete(self, key: str) -> None:
        """Remove a key, if present."""

    def delete_by_prefix(self, prefix: str) -> int:
        """Remove every key starting with the prefix."""

    async def get_or_set(
        self, key: str, ttl_seconds: float, fetch: Callable[[], Awaitable[T]]
    ) -> T:
        """Return the cached value or fetch, store and return a fresh one."""

    def clear(self) -> None:
        """Drop all entries."""


class _FetchAbandoned(Exception):
    """The caller running a shared fetch was cancelled before it finished."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache with lazy expiry.

    Expired entries are only removed when they are next looked up; there is
    no background sweep. Concurrent ``get_or_set`` calls for the same cold
    key share a single in-flight fetch. Deleting a key detaches its in-flight
    fetch: callers already waiting still get its result, but the result is
    not stored and later callers start a new fetch.
    """

    clock: Clock = _utc_now
    _entries: dict[str, _CacheEntry] = field(default_factory=dict, repr=False)
    _in_flight: dict[str, asyncio.Future] = field(default_factory=dict, repr=False)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str, default: object | None = None) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._live_entry(key)
        if entry is None:
            return default
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: float) -> None:
        """Store a cached value with a TTL."""
        expires_at = self.clock() + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def has(self, key: str) -> bool:
        """Return True if the key holds a live entry."""
        return self._live_entry(key) is not None

    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        self._entries.pop(key, None)
        self._in_flight.pop(key, None)

    def delete_by_prefix(self, prefix: str) -> int:
        """Remove all keys that start with ``prefix`` and return the count."""
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        for key in [key for key in self._in_flight if key.startswith(prefix)]:
            del self._in_flight[key]
        return len(doomed)

    async def get_or_set(
        self, key: str, ttl_seconds: float, fetch: Callable[[], Awaitable[T]]
    ) -> T:
        """Return a live cached value or await ``fetch`` and cache its result.

        Nothing is cached when ``fetch`` raises; the error reaches every
        caller waiting on the same key. If the caller running the fetch is
        cancelled, the waiting callers start over instead of being cancelled.
        """
        while True:
            entry = self._live_entry(key)
            if entry is not None:
                return entry.value  # type: ignore[return-value]

            pending = self._in_flight.get(key)
            if pending is None:
                break
            try:
                return await asyncio.shield(pending)
            except _FetchAbandoned:
                continue

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            value = await fetch()
        except asyncio.CancelledError:
            self._settle_with_error(key, future, _FetchAbandoned(key))
            raise
        except Exception as exc:
            self._settle_with_error(key, future, exc)
            raise

        # An invalidation while the fetch ran detached it; the value may be stale.
        if self._in_flight.get(key) is future:
            del self._in_flight[key]
            self.set(key, value, ttl_seconds)
        future.set_result(value)
        return value

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()
        self._in_flight.clear()

    def _settle_with_error(
        self, key: str, future: asyncio.Future, error: BaseException
    ) -> None:
        if self._in_flight.get(key) is future:
            del self._in_flight[key]
        future.set_exception(error)
        # Mark retrieved so an unawaited future does not log the error.
        future.exception()

    def _live_entry(self, key: str) -> _CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry
