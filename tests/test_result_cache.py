"""Tests for the single-slot result cache."""

from catalog.services import ResultCache


class TestResultCache:
    """Test ResultCache TTL and invalidation."""

    def test_empty_cache_returns_none(self, clock):
        """Test that a new cache holds nothing."""
        cache = ResultCache(ttl_seconds=60, clock=clock)

        assert cache.get() is None

    def test_value_served_within_ttl(self, clock):
        """Test that a stored value is returned until the TTL elapses."""
        cache = ResultCache(ttl_seconds=60, clock=clock)
        payload = {"data": [1, 2, 3]}

        cache.put(payload)
        clock.advance(59.9)

        assert cache.get() is payload

    def test_value_expires_at_ttl(self, clock):
        """Test that an entry aged exactly the TTL is discarded."""
        cache = ResultCache(ttl_seconds=60, clock=clock)

        cache.put("page")
        clock.advance(60)

        assert cache.get() is None
        # Still gone once the clock no longer matters
        clock.now -= 60
        assert cache.get() is None

    def test_put_replaces_single_slot(self, clock):
        """Test that the cache holds at most one entry and refreshes its age."""
        cache = ResultCache(ttl_seconds=60, clock=clock)

        cache.put("first")
        clock.advance(50)
        cache.put("second")
        clock.advance(50)

        assert cache.get() == "second"

    def test_clear_drops_entry(self, clock):
        """Test that clear() invalidates a fresh entry."""
        cache = ResultCache(ttl_seconds=60, clock=clock)

        cache.put("page")
        cache.clear()

        assert cache.get() is None

    def test_default_ttl(self):
        """Test the 60 second default."""
        assert ResultCache().ttl_seconds == 60
