"""
Tests for the cleanup sweeper.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from hncache.cache.coordinator import CacheCoordinator
from hncache.cache.sweeper import CleanupSweeper
from hncache.types import entity_key


async def _value(value):
    return value


class TestSweeperCorrectness:
    """Test expired entries disappear without being read."""

    @pytest.mark.asyncio
    async def test_run_once_removes_expired_entries(self, clock) -> None:
        """Test entries past their TTL leave the cache's observable size."""
        coordinator = CacheCoordinator(clock=clock)
        await coordinator.resolve(entity_key(1), 600, lambda: _value({"id": 1}))
        await coordinator.resolve(entity_key(2), 10, lambda: _value({"id": 2}))
        sweeper = CleanupSweeper(coordinator, interval=60)

        clock.advance(60)
        removed = await sweeper.run_once()

        assert removed == 1
        assert len(coordinator.cache) == 1
        assert coordinator.stats().cached_entity_count == 1

    @pytest.mark.asyncio
    async def test_background_loop_sweeps_periodically(self, clock) -> None:
        """Test the owned task sweeps on its interval."""
        coordinator = CacheCoordinator(clock=clock)
        await coordinator.resolve(entity_key(1), 5, lambda: _value({"id": 1}))
        clock.advance(10)

        sweeper = CleanupSweeper(coordinator, interval=0.01)
        sweeper.start()
        try:
            for _ in range(100):
                if len(coordinator.cache) == 0:
                    break
                await asyncio.sleep(0.01)
        finally:
            await sweeper.stop()

        assert len(coordinator.cache) == 0
        assert coordinator.sweeps >= 1


class TestSweeperLifecycle:
    """Test start/stop semantics."""

    @pytest.mark.asyncio
    async def test_start_and_stop_are_idempotent(self, clock) -> None:
        """Test repeated start/stop calls are harmless."""
        sweeper = CleanupSweeper(CacheCoordinator(clock=clock), interval=60)

        sweeper.start()
        sweeper.start()
        assert sweeper.running

        await sweeper.stop()
        await sweeper.stop()
        assert not sweeper.running

    @pytest.mark.asyncio
    async def test_loop_survives_a_failing_sweep(self, clock) -> None:
        """Test an error in one sweep does not end the loop."""
        coordinator = CacheCoordinator(clock=clock)
        coordinator.sweep = AsyncMock(side_effect=[RuntimeError("bad"), 0, 0, 0, 0, 0])

        sweeper = CleanupSweeper(coordinator, interval=0.005)
        sweeper.start()
        try:
            for _ in range(100):
                if coordinator.sweep.await_count >= 2:
                    break
                await asyncio.sleep(0.005)
            assert sweeper.running
        finally:
            await sweeper.stop()

        assert coordinator.sweep.await_count >= 2

    def test_rejects_non_positive_interval(self, clock) -> None:
        """Test the interval must be positive."""
        with pytest.raises(ValueError):
            CleanupSweeper(CacheCoordinator(clock=clock), interval=0)
