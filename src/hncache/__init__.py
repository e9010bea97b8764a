"""
hn-cache - caching and concurrent-fetch layer for the Hacker News API.

The remote API has no batch endpoint and punishes naive fan-out, so this
package sits between callers and the API and provides:
- TTL caching of the top listing and of individual items
- De-duplication of concurrent requests for the same key
- Bounded-concurrency batch retrieval with ordered per-item results
- A periodic sweeper that drops expired entries

Example:
    async with HNClient() as hn:
        results = await hn.get_top_items(10)
"""

__all__ = [
    "__version__",
    "BatchResult",
    "CacheStats",
    "HNClient",
    "Item",
]
__version__ = "0.1.0"

from hncache.client import HNClient
from hncache.types import BatchResult, CacheStats, Item
