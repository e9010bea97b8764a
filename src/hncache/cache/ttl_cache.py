"""
In-memory TTL cache.

Entries expire lazily on read; the cleanup sweeper removes the rest.
Not safe for uncoordinated mutation: only the CacheCoordinator and the
sweeper touch it, under the coordinator's lock.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from hncache.types import CacheEntry, CacheKey

Clock = Callable[[], float]


class TTLCache:
    """Mapping from cache key to CacheEntry with read-time expiry."""

    def __init__(self, clock: Clock | None = None) -> None:
        """Initialize the cache.

        Args:
            clock: Monotonic time source in seconds. Defaults to time.monotonic.
        """
        self._clock = clock or time.monotonic
        self._entries: dict[CacheKey, CacheEntry] = {}

    def get(self, key: CacheKey) -> Any | None:
        """Return the stored value if still fresh, else None.

        Expired entries are dropped here as they are found.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: CacheKey, value: Any, ttl: float) -> CacheEntry:
        """Store value for ttl seconds, replacing any existing entry."""
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl)
        self._entries[key] = entry
        return entry

    def delete(self, key: CacheKey) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self, now: float | None = None) -> int:
        """Remove every entry whose expiry has passed.

        Args:
            now: Time to compare against. Defaults to the cache clock.

        Returns:
            Number of entries removed.
        """
        if now is None:
            now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at < now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def count(self, predicate: Callable[[CacheKey], bool] | None = None) -> int:
        """Count stored entries, fresh or not yet swept."""
        if predicate is None:
            return len(self._entries)
        return sum(1 for key in self._entries if predicate(key))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and entry.is_fresh(self._clock())
