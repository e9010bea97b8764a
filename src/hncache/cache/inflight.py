"""
Table of remote fetches currently in progress.

Each entry is the shared pending result of one leader fetch; concurrent
callers for the same key await it instead of issuing their own request.
"""

from __future__ import annotations

import asyncio
from typing import Any

from hncache.types import CacheKey


class InFlightTable:
    """Mapping from cache key to the future of its outstanding fetch."""

    def __init__(self) -> None:
        self._pending: dict[CacheKey, asyncio.Future[Any]] = {}

    def get(self, key: CacheKey) -> asyncio.Future[Any] | None:
        return self._pending.get(key)

    def publish(self, key: CacheKey) -> asyncio.Future[Any]:
        """Create and register the pending result for key.

        Raises:
            RuntimeError: If a fetch for key is already in flight.
        """
        if key in self._pending:
            raise RuntimeError(f"fetch already in flight for {key!r}")
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        return future

    def remove(self, key: CacheKey) -> asyncio.Future[Any] | None:
        return self._pending.pop(key, None)

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: object) -> bool:
        return key in self._pending
