"""
Cache package.

This package provides the in-memory caching layers:
- TTL cache (ttl_cache.py): key -> value with read-time expiry
- In-flight table (inflight.py): shared pending results of running fetches
- Coordinator (coordinator.py): single entry point combining both
- Sweeper (sweeper.py): periodic removal of expired entries
"""

from hncache.cache.coordinator import CacheCoordinator
from hncache.cache.inflight import InFlightTable
from hncache.cache.sweeper import CleanupSweeper
from hncache.cache.ttl_cache import TTLCache

__all__ = [
    "CacheCoordinator",
    "CleanupSweeper",
    "InFlightTable",
    "TTLCache",
]
