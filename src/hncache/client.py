"""
Caching Hacker News client.

The public face of the package. Summarizers, report builders and chat
integrations call get_listing, get_entity and get_batch here; every read
is served from the TTL cache, joined to an in-flight fetch, or fetched
once and cached.

Example:
    async with HNClient() as hn:
        ids = await hn.get_listing()
        results = await hn.get_batch(ids[:10])
        stories = [r.value for r in results if r.found]
"""

from __future__ import annotations

import copy
import functools
from typing import Any, Sequence

from hncache.batch import BoundedBatchExecutor
from hncache.cache.coordinator import CacheCoordinator
from hncache.cache.sweeper import CleanupSweeper
from hncache.cache.ttl_cache import Clock
from hncache.config import Settings, get_settings
from hncache.data.fetcher import EntityFetcher
from hncache.logging import get_logger, log_context, setup_logging
from hncache.types import (
    LISTING_KEY,
    BatchResult,
    CacheStats,
    CommentNode,
    Item,
    entity_key,
    generate_id,
)

logger = get_logger(__name__)

# Comments are loaded a few at a time per parent
DEFAULT_COMMENT_CONCURRENCY = 5


class HNClient:
    """Caching, de-duplicating, batch-capable client for the HN API.

    Use as an async context manager so the cleanup sweeper is started and
    stopped with the client. Without it, call start() and close().
    """

    def __init__(
        self,
        settings: Settings | None = None,
        fetcher: EntityFetcher | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Settings to use. Defaults to get_settings().
            fetcher: Remote reader. Built from settings if None.
            clock: Monotonic time source for the cache (tests pass a fake).
        """
        self.settings = settings or get_settings()
        setup_logging(self.settings.LOG_LEVEL)
        self.fetcher = fetcher or EntityFetcher.from_settings(self.settings)
        self.coordinator = CacheCoordinator(clock=clock)
        self.sweeper = CleanupSweeper(self.coordinator, self.settings.SWEEP_INTERVAL_SECONDS)
        self._batch = BoundedBatchExecutor(self.get_entity, self.settings.BATCH_CONCURRENCY)
        self._listing_served_from_cache = False

    async def __aenter__(self) -> HNClient:
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def start(self) -> None:
        """Start the cleanup sweeper. Needs a running event loop."""
        self.sweeper.start()
        logger.info("HN client started", **self.settings.display())

    async def close(self) -> None:
        """Stop the sweeper, cancel outstanding fetches and close HTTP."""
        await self.sweeper.stop()
        await self.coordinator.aclose()
        await self.fetcher.close()

    async def get_listing(self) -> list[int]:
        """Get the top listing, freshest first.

        Cached for LISTING_TTL_SECONDS. A null listing upstream returns []
        and is not cached.

        Raises:
            DataFetchError: If the remote read fails.
        """
        with log_context(operation="get_listing"):
            ids, state = await self.coordinator.resolve_with_state(
                LISTING_KEY,
                self.settings.LISTING_TTL_SECONDS,
                self.fetcher.fetch_listing,
            )
        self._listing_served_from_cache = state == "hit"
        return list(ids) if ids is not None else []

    async def get_entity(self, entity_id: int) -> dict[str, Any] | None:
        """Get one entity record.

        Cached for ENTITY_TTL_SECONDS. Absent entities return None and are
        not cached, so a later call asks upstream again.

        Raises:
            DataFetchError: If the remote read fails.
        """
        payload = await self.coordinator.resolve(
            entity_key(entity_id),
            self.settings.ENTITY_TTL_SECONDS,
            functools.partial(self.fetcher.fetch_entity, entity_id),
        )
        # Deep copy: nested lists such as kids must not alias the cached record
        return copy.deepcopy(payload) if payload is not None else None

    async def get_batch(
        self,
        ids: Sequence[int],
        concurrency_limit: int | None = None,
    ) -> list[BatchResult]:
        """Get many entities with bounded concurrency.

        Args:
            ids: Entity IDs in the order results should come back.
            concurrency_limit: Maximum concurrent resolutions. Defaults to
                BATCH_CONCURRENCY.

        Returns:
            One BatchResult per id in input order. Failures are reported in
            their own position and never affect siblings.
        """
        with log_context(operation="get_batch", batch_id=generate_id("batch")):
            return await self._batch.run(list(ids), concurrency_limit)

    async def get_top_items(
        self, limit: int = 10, concurrency_limit: int | None = None
    ) -> list[BatchResult]:
        """Get the first limit entities of the top listing."""
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        ids = await self.get_listing()
        return await self.get_batch(ids[:limit], concurrency_limit)

    async def get_comment_tree(
        self,
        entity_id: int,
        max_depth: int = 2,
        comment_concurrency: int = DEFAULT_COMMENT_CONCURRENCY,
    ) -> CommentNode | None:
        """Load an item and its comments down to max_depth levels.

        Each parent's kids are fetched as one bounded batch. Deleted, dead,
        absent and failed comments are left out of the tree.

        Returns:
            The root node, or None if the item does not exist.

        Raises:
            DataFetchError: If the root item cannot be fetched.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {max_depth}")

        payload = await self.get_entity(entity_id)
        if payload is None:
            return None

        root = CommentNode(Item.from_payload(payload))
        level = [root]
        for _ in range(max_depth):
            next_level: list[CommentNode] = []
            for node in level:
                if not node.item.kids:
                    continue
                results = await self.get_batch(node.item.kids, comment_concurrency)
                for result in results:
                    if not result.ok:
                        logger.warning(
                            "Skipping comment that failed to load",
                            parent=node.item.id,
                            comment=result.key,
                            error=str(result.error),
                        )
                        continue
                    if result.value is None:
                        continue
                    child = Item.from_payload(result.value)
                    if not child.visible:
                        continue
                    child_node = CommentNode(child)
                    node.children.append(child_node)
                    next_level.append(child_node)
            if not next_level:
                break
            level = next_level

        return root

    def stats(self) -> CacheStats:
        """Snapshot of cache state for observability."""
        stats = self.coordinator.stats()
        stats.listing_served_from_cache = self._listing_served_from_cache
        return stats
