"""
Tests for the availability result cache
=======================================
"""

from brandfinder.utils import ResultCache

from conftest import FrozenClock


class TestResultCache:
    """TTL behaviour of ResultCache."""

    def test_hit_before_expiry(self):
        clock = FrozenClock()
        cache = ResultCache(ttl_seconds=100, clock=clock)
        cache.set("ecoleaf.com", True)
        clock.now = 99
        entry = cache.get("ecoleaf.com")
        assert entry['available'] is True
        assert entry['method'] == 'dns'

    def test_expired_entry_evicted(self):
        clock = FrozenClock()
        cache = ResultCache(ttl_seconds=100, clock=clock)
        cache.set("ecoleaf.com", True)
        clock.now = 100
        assert cache.get("ecoleaf.com") is None

    def test_errors_kept_briefly(self):
        clock = FrozenClock()
        cache = ResultCache(ttl_seconds=1000, error_ttl_seconds=60, clock=clock)
        cache.set("flaky.com", None, error="dns timeout")
        clock.now = 59
        assert cache.get("flaky.com")['error'] == "dns timeout"
        clock.now = 61
        assert cache.get("flaky.com") is None

    def test_zero_ttl_not_stored(self):
        cache = ResultCache()
        cache.set("ecoleaf.com", True, ttl_seconds=0)
        assert cache.get("ecoleaf.com") is None
