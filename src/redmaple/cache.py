"""Time-to-live cache wrapping an async fetch operation.

Every network-backed client owns one ``TtlCache`` per resource. The cache
calls the wrapped fetch coroutine on a miss or once the entry has expired and
stores the result wholesale. A failed refresh never touches the stored entry;
what the caller sees on failure is decided by ``on_refresh_error``.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from redmaple.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and the moment it was fetched."""

    value: T
    fetched_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now < self.fetched_at + self.ttl


class TtlCache(Generic[T]):
    """Freshness-gated memoizer for a keyed async fetch.

    Usage:
        cache = TtlCache(fetch_feed, ttl=60, name="subway")
        feed = await cache.get("L")

    The TTL comes from ``ttl`` or, when ``ttl_from`` is given, from the fetched
    payload itself (falling back to ``ttl`` if the payload declares none).
    A TTL of zero disables caching. Each key has its own lock so concurrent
    misses on one key result in a single fetch.
    """

    def __init__(
        self,
        fetch: Callable[[str], Awaitable[T]],
        *,
        ttl: float | None = None,
        ttl_from: Callable[[T], float | None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ) -> None:
        if ttl is None and ttl_from is None:
            msg = "TtlCache needs either ttl or ttl_from"
            raise ValueError(msg)
        if ttl is not None and ttl < 0:
            msg = f"ttl must be >= 0, got {ttl}"
            raise ValueError(msg)

        self._fetch = fetch
        self._ttl = ttl
        self._ttl_from = ttl_from
        self._clock = clock
        self._name = name
        self._entries: dict[str, CacheEntry[T]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._fetch_count = 0

    @property
    def fetch_count(self) -> int:
        """Number of successful underlying fetches."""
        return self._fetch_count

    def peek(self, key: str = "") -> CacheEntry[T] | None:
        """Return the stored entry for ``key`` without refreshing it."""
        return self._entries.get(key)

    def invalidate(self, key: str | None = None) -> None:
        """Drop one entry, or every entry when ``key`` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    async def get(self, key: str = "") -> T:
        """Return the cached value for ``key``, refetching if it has expired.

        Raises:
            Exception: Whatever the fetch raised, unless ``on_refresh_error``
                decides otherwise.
        """
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(self._clock()):
            logger.debug("Cache hit", cache=self._name, key=key)
            return entry.value

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another caller may have refreshed the entry while we waited.
            entry = self._entries.get(key)
            now = self._clock()
            if entry is not None and entry.is_fresh(now):
                return entry.value

            logger.debug("Cache miss", cache=self._name, key=key)
            try:
                value = await self._fetch(key)
            except Exception as exc:
                return self.on_refresh_error(key, exc, entry)

            self._entries[key] = CacheEntry(value=value, fetched_at=now, ttl=self._resolve_ttl(value))
            self._fetch_count += 1
            return value

    def on_refresh_error(self, key: str, exc: Exception, stale: CacheEntry[T] | None) -> T:
        """Decide what a failed refresh returns. The default is to re-raise."""
        raise exc

    def _resolve_ttl(self, value: T) -> float:
        if self._ttl_from is not None:
            declared = self._ttl_from(value)
            if declared is not None:
                return max(0.0, float(declared))
        return float(self._ttl or 0)


class StaleTolerantCache(TtlCache[T]):
    """TtlCache that serves the last good value when a refresh fails."""

    def on_refresh_error(self, key: str, exc: Exception, stale: CacheEntry[T] | None) -> T:
        if stale is None:
            raise exc
        logger.warning(
            "Refresh failed, serving stale value",
            cache=self._name,
            key=key,
            age_sec=round(self._clock() - stale.fetched_at, 1),
            error=str(exc),
        )
        return stale.value
