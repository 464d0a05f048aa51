"""
Tests for CollectionCache

Uses an injected clock so expiry is deterministic.
"""
import pytest
from unittest.mock import Mock

from services.collection_cache import CollectionCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestCollectionCache:
    def test_hit_within_ttl(self):
        clock = FakeClock()
        cache = CollectionCache(ttl_seconds=600, clock=clock)
        loader = Mock(return_value=[1, 2])

        assert cache.get("stations", loader) == [1, 2]
        clock.now += 599
        assert cache.get("stations", loader) == [1, 2]

        loader.assert_called_once()
        assert "stations" in cache

    def test_reload_after_expiry(self):
        clock = FakeClock()
        cache = CollectionCache(ttl_seconds=600, clock=clock)
        loader = Mock(side_effect=[["old"], ["new"]])

        cache.get("stations", loader)
        clock.now += 600

        assert "stations" not in cache
        assert cache.get("stations", loader) == ["new"]
        assert loader.call_count == 2

    def test_failed_load_not_cached(self):
        cache = CollectionCache(clock=FakeClock())
        loader = Mock(side_effect=[ConnectionError("down"), ["ok"]])

        with pytest.raises(ConnectionError):
            cache.get("structures", loader)
        assert len(cache) == 0
        assert cache.get("structures", loader) == ["ok"]

    def test_zero_ttl_disables_caching(self):
        cache = CollectionCache(ttl_seconds=0, clock=FakeClock())
        loader = Mock(return_value=[1])

        cache.get("stations", loader)
        cache.get("stations", loader)

        assert loader.call_count == 2
        assert len(cache) == 0

    def test_invalidate(self):
        cache = CollectionCache(clock=FakeClock())
        cache.get("a", lambda: 1)
        cache.get("b", lambda: 2)

        cache.invalidate("a")
        assert "a" not in cache and "b" in cache

        cache.invalidate()
        assert len(cache) == 0

    def test_instances_are_independent(self):
        first = CollectionCache(clock=FakeClock())
        second = CollectionCache(clock=FakeClock())
        first.get("stations", lambda: [1])
        assert "stations" not in second
