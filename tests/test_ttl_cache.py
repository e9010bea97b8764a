"""
Tests for the TTL cache.
"""

from __future__ import annotations

from hncache.cache.ttl_cache import TTLCache
from hncache.types import LISTING_KEY, entity_key, is_entity_key


class TestTTLCacheFreshness:
    """Test read-time expiry."""

    def test_get_returns_value_within_ttl(self, clock) -> None:
        """Test that a value is served until its TTL elapses."""
        cache = TTLCache(clock)
        cache.set("entity:1", {"id": 1}, ttl=10)

        clock.advance(9.99)
        assert cache.get("entity:1") == {"id": 1}

    def test_get_treats_expired_entry_as_absent(self, clock) -> None:
        """Test that an entry is absent exactly at its expiry time."""
        cache = TTLCache(clock)
        cache.set("entity:1", {"id": 1}, ttl=10)

        clock.advance(10)
        assert cache.get("entity:1") is None
        # Lazily removed on that read
        assert len(cache) == 0

    def test_get_missing_key(self, clock) -> None:
        """Test that unknown keys are absent."""
        assert TTLCache(clock).get("nope") is None

    def test_set_overwrites_and_restarts_ttl(self, clock) -> None:
        """Test that a refreshed value replaces the old entry."""
        cache = TTLCache(clock)
        cache.set(LISTING_KEY, [1, 2], ttl=5)
        clock.advance(4)
        cache.set(LISTING_KEY, [3], ttl=5)
        clock.advance(4)

        assert cache.get(LISTING_KEY) == [3]

    def test_contains_only_fresh(self, clock) -> None:
        """Test membership ignores expired entries."""
        cache = TTLCache(clock)
        cache.set("a", 1, ttl=1)
        assert "a" in cache
        clock.advance(2)
        assert "a" not in cache

    def test_delete_and_clear(self, clock) -> None:
        """Test explicit removal."""
        cache = TTLCache(clock)
        cache.set("a", 1, ttl=1)
        cache.set("b", 2, ttl=1)

        assert cache.delete("a") is True
        assert cache.delete("a") is False
        cache.clear()
        assert len(cache) == 0


class TestTTLCacheSweep:
    """Test eager removal of expired entries."""

    def test_sweep_removes_only_expired(self, clock) -> None:
        """Test that sweep drops expired entries and keeps fresh ones."""
        cache = TTLCache(clock)
        cache.set(LISTING_KEY, [1], ttl=120)
        cache.set(entity_key(1), {"id": 1}, ttl=600)

        clock.advance(121)
        removed = cache.sweep()

        assert removed == 1
        assert len(cache) == 1
        assert cache.get(entity_key(1)) == {"id": 1}

    def test_sweep_with_explicit_time(self, clock) -> None:
        """Test sweep against a caller-supplied time."""
        cache = TTLCache(clock)
        cache.set("a", 1, ttl=10)

        assert cache.sweep(now=clock.now + 5) == 0
        assert cache.sweep(now=clock.now + 11) == 1

    def test_count_by_category(self, clock) -> None:
        """Test counting entity entries separately from the listing."""
        cache = TTLCache(clock)
        cache.set(LISTING_KEY, [1, 2], ttl=120)
        cache.set(entity_key(1), {"id": 1}, ttl=600)
        cache.set(entity_key(2), {"id": 2}, ttl=600)

        assert cache.count() == 3
        assert cache.count(is_entity_key) == 2
