"""
Bounded-concurrency batch resolution.

A fixed pool of workers pulls keys off a shared cursor, so a new
resolution starts as soon as any running one settles (sliding window,
not fixed waves). Results keep input order and each position carries its
own success or failure.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Sequence, cast

from hncache.logging import get_logger
from hncache.types import BatchResult

logger = get_logger(__name__)

Resolver = Callable[[Any], Awaitable[Any]]


async def run_bounded(
    keys: Sequence[Any],
    resolver: Resolver,
    limit: int,
) -> list[BatchResult]:
    """Resolve keys with at most limit resolutions in progress.

    Args:
        keys: Ordered keys to resolve. Duplicates are resolved per position.
        resolver: Coroutine function mapping one key to its value.
        limit: Concurrency ceiling.

    Returns:
        One BatchResult per key, output[i] corresponding to keys[i].

    Raises:
        ValueError: If limit is less than 1.
    """
    if limit < 1:
        raise ValueError(f"concurrency limit must be at least 1, got {limit}")
    if not keys:
        return []

    results: list[BatchResult | None] = [None] * len(keys)
    cursor = iter(enumerate(keys))

    async def worker() -> None:
        # The shared iterator hands each index to exactly one worker
        for index, key in cursor:
            try:
                value = await resolver(key)
            except Exception as exc:
                results[index] = BatchResult(key=key, error=exc)
            else:
                results[index] = BatchResult(key=key, value=value)

    await asyncio.gather(*(worker() for _ in range(min(limit, len(keys)))))
    return cast("list[BatchResult]", results)


class BoundedBatchExecutor:
    """Batch runner bound to one resolver and a default limit."""

    def __init__(self, resolver: Resolver, limit: int = 12) -> None:
        if limit < 1:
            raise ValueError(f"concurrency limit must be at least 1, got {limit}")
        self.resolver = resolver
        self.limit = limit

    async def run(self, keys: Sequence[Any], limit: int | None = None) -> list[BatchResult]:
        limit = self.limit if limit is None else limit
        results = await run_bounded(keys, self.resolver, limit)

        failed = sum(1 for r in results if not r.ok)
        logger.info(
            "Batch resolved",
            size=len(results),
            failed=failed,
            limit=limit,
        )
        return results
