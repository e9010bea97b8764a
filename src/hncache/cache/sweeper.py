"""
Periodic removal of expired cache entries.

Read-time expiry already keeps stale values from being served; the
sweeper bounds memory for keys that are never read again.
"""

from __future__ import annotations

import asyncio

from hncache.cache.coordinator import CacheCoordinator
from hncache.logging import get_logger

logger = get_logger(__name__)


class CleanupSweeper:
    """Owned, cancellable task that sweeps the coordinator's cache."""

    def __init__(self, coordinator: CacheCoordinator, interval: float) -> None:
        """Initialize the sweeper.

        Args:
            coordinator: Coordinator whose cache is swept.
            interval: Seconds between sweeps.
        """
        if interval <= 0:
            raise ValueError("sweep interval must be positive")
        self.coordinator = coordinator
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop on the running event loop. Idempotent."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="hncache-sweeper")
        logger.debug("Sweeper started", interval=self.interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish. Idempotent."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Sweeper stopped")

    async def run_once(self) -> int:
        """Run one sweep now.

        Returns:
            Number of entries removed.
        """
        removed = await self.coordinator.sweep()
        if removed:
            logger.info("Swept expired cache entries", removed=removed)
        else:
            logger.debug("Sweep found nothing to remove")
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.run_once()
            except Exception as e:
                logger.error("Cache sweep failed", error=str(e), exc_info=True)
