"""
Cache coordinator: TTL cache plus single-flight de-duplication.

Every read goes through resolve():
1. A fresh cache entry is returned directly.
2. Otherwise, if a fetch for the key is already in flight, the caller
   waits on its shared result.
3. Otherwise the caller becomes the leader: it publishes a pending result,
   starts the remote fetch in an owned task and every caller (leader
   included) waits on that result.

Bookkeeping (cache lookup, table lookup and insert, settle) runs under one
asyncio.Lock that is never held across the remote call. Failures and absent
(None) payloads are handed to every waiter and never cached.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Awaitable, Callable

from hncache.cache.inflight import InFlightTable
from hncache.cache.ttl_cache import Clock, TTLCache
from hncache.logging import get_logger
from hncache.types import CacheKey, CacheState, CacheStats, is_entity_key

logger = get_logger(__name__)

FetchFn = Callable[[], Awaitable[Any]]


class CacheCoordinator:
    """Owns the TTL cache and the in-flight table; all mutation funnels here."""

    def __init__(self, cache: TTLCache | None = None, clock: Clock | None = None) -> None:
        """Initialize the coordinator.

        Args:
            cache: Cache to own. A new TTLCache is created if None.
            clock: Time source for a newly created cache.
        """
        self._cache = cache if cache is not None else TTLCache(clock)
        self._inflight = InFlightTable()
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

        self.hits = 0
        self.misses = 0
        self.coalesced = 0
        self.failures = 0
        self.sweeps = 0
        self.swept_entries = 0

    @property
    def cache(self) -> TTLCache:
        return self._cache

    @property
    def in_flight_count(self) -> int:
        return len(self._inflight)

    async def resolve(self, key: CacheKey, ttl: float, fetch_fn: FetchFn) -> Any:
        """Return the payload for key, fetching it at most once concurrently.

        Args:
            key: Cache key.
            ttl: Lifetime in seconds of a newly fetched payload.
            fetch_fn: Zero-argument coroutine function performing the remote read.

        Returns:
            The payload, or None if the remote reports it absent.

        Raises:
            Exception: Whatever fetch_fn raised, shared by all waiters.
        """
        value, _ = await self.resolve_with_state(key, ttl, fetch_fn)
        return value

    async def resolve_with_state(
        self, key: CacheKey, ttl: float, fetch_fn: FetchFn
    ) -> tuple[Any, CacheState]:
        """Like resolve(), also reporting whether it was a hit, miss or wait."""
        async with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self.hits += 1
                logger.debug("Cache hit", key=key)
                return cached, "hit"

            future = self._inflight.get(key)
            if future is not None:
                self.coalesced += 1
                state: CacheState = "wait"
                logger.debug("Joining in-flight fetch", key=key)
            else:
                self.misses += 1
                state = "miss"
                future = self._inflight.publish(key)
                task = asyncio.create_task(
                    self._lead(key, ttl, fetch_fn, future),
                    name=f"hncache-fetch:{key}",
                )
                self._tasks.add(task)
                task.add_done_callback(functools.partial(self._forget, key, future))
                logger.debug("Cache miss, fetching", key=key)

        # Shielded: a cancelled waiter must not cancel the shared fetch
        value = await asyncio.shield(future)
        return value, state

    async def _lead(
        self,
        key: CacheKey,
        ttl: float,
        fetch_fn: FetchFn,
        future: asyncio.Future[Any],
    ) -> None:
        try:
            value = await fetch_fn()
        except Exception as exc:
            async with self._lock:
                self.failures += 1
                if not future.done():
                    future.set_exception(exc)
                    # Consumed here so a failure nobody awaits does not warn
                    future.exception()
                self._inflight.remove(key)
            logger.warning(
                "Fetch failed",
                key=key,
                error=str(exc),
                reason=getattr(exc, "reason", type(exc).__name__),
            )
            return

        async with self._lock:
            if value is not None:
                self._cache.set(key, value, ttl)
            if not future.done():
                future.set_result(value)
            self._inflight.remove(key)

    def _forget(
        self, key: CacheKey, future: asyncio.Future[Any], task: asyncio.Task[None]
    ) -> None:
        self._tasks.discard(task)
        # A leader cancelled before settling leaves its waiters cancelled, not hanging
        if not future.done():
            future.cancel()
        if self._inflight.get(key) is future:
            self._inflight.remove(key)

    def peek(self, key: CacheKey) -> Any | None:
        """Fresh cached value for key without fetching."""
        return self._cache.get(key)

    async def invalidate(self, key: CacheKey) -> bool:
        async with self._lock:
            return self._cache.delete(key)

    async def clear(self) -> None:
        """Drop all cache entries. In-flight fetches are left running."""
        async with self._lock:
            self._cache.clear()

    async def sweep(self, now: float | None = None) -> int:
        """Remove expired entries from the cache.

        Returns:
            Number of entries removed.
        """
        async with self._lock:
            removed = self._cache.sweep(now)
            self.sweeps += 1
            self.swept_entries += removed
        return removed

    def stats(self) -> CacheStats:
        """Counters plus entity entries held, expired or not, until swept."""
        return CacheStats(
            cached_entity_count=self._cache.count(is_entity_key),
            hits=self.hits,
            misses=self.misses,
            coalesced=self.coalesced,
            failures=self.failures,
            in_flight=len(self._inflight),
            sweeps=self.sweeps,
            swept_entries=self.swept_entries,
        )

    async def aclose(self) -> None:
        """Cancel leader fetches still running at teardown."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
