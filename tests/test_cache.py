"""
Tests for DnsCache

Coverage includes:
- Fresh vs stale reads
- Overwrite semantics (last write wins)
- Hit counting
- Housekeeping (delete, clear, keys, size)
"""

import pytest

from fetch_failover_dsn.cache import DnsCache


@pytest.fixture
def cache(clock) -> DnsCache:
    return DnsCache(ttl_seconds=60.0, clock=clock)


class TestFreshness:
    """Tests for get_fresh / get_stale"""

    def test_missing_entry(self, cache):
        """Should return None for unknown hostnames"""
        assert cache.get_fresh("pve.lan") is None
        assert cache.get_stale("pve.lan") is None

    def test_fresh_within_ttl(self, cache, clock):
        """Should serve entries younger than the TTL"""
        cache.set("pve.lan", ["10.0.0.1", "10.0.0.2"])
        clock.advance(59.9)
        entry = cache.get_fresh("pve.lan")
        assert entry is not None
        assert entry.addresses == ["10.0.0.1", "10.0.0.2"]

    def test_not_fresh_at_ttl(self, cache, clock):
        """Should stop serving fresh reads once the TTL has elapsed"""
        cache.set("pve.lan", ["10.0.0.1"])
        clock.advance(60.0)
        assert cache.get_fresh("pve.lan") is None

    def test_stale_entry_retained(self, cache, clock):
        """Should keep expired entries available as stale fallback"""
        cache.set("pve.lan", ["10.0.0.1"])
        clock.advance(3600.0)
        entry = cache.get_stale("pve.lan")
        assert entry is not None
        assert entry.addresses == ["10.0.0.1"]
        assert "pve.lan" in cache

    def test_hit_count(self, cache):
        """Should count reads served from the entry"""
        cache.set("pve.lan", ["10.0.0.1"])
        cache.get_fresh("pve.lan")
        cache.get_fresh("pve.lan")
        assert cache.get("pve.lan").hit_count == 2


class TestSet:
    """Tests for set"""

    def test_overwrite_refreshes_timestamp(self, cache, clock):
        """Should replace the entry and restart its freshness"""
        cache.set("pve.lan", ["10.0.0.1"])
        clock.advance(70.0)
        cache.set("pve.lan", ["10.0.0.2"])

        entry = cache.get_fresh("pve.lan")
        assert entry is not None
        assert entry.addresses == ["10.0.0.2"]
        assert entry.resolved_at == clock.now

    def test_stores_a_copy(self, cache):
        """Should not alias the caller's list"""
        addresses = ["10.0.0.1"]
        cache.set("pve.lan", addresses)
        addresses.append("10.0.0.99")
        assert cache.get("pve.lan").addresses == ["10.0.0.1"]

    def test_rejects_empty(self, cache):
        """Should never store an empty resolution"""
        with pytest.raises(ValueError):
            cache.set("pve.lan", [])
        assert cache.size() == 0


class TestHousekeeping:
    """Tests for delete, clear, keys and size"""

    def test_delete(self, cache):
        """Should report whether an entry was removed"""
        cache.set("pve.lan", ["10.0.0.1"])
        assert cache.delete("pve.lan") is True
        assert cache.delete("pve.lan") is False

    def test_keys_and_size(self, cache):
        """Should list cached hostnames"""
        cache.set("pve.lan", ["10.0.0.1"])
        cache.set("pbs.lan", ["10.0.0.5"])
        assert sorted(cache.keys()) == ["pbs.lan", "pve.lan"]
        assert cache.size() == 2

    def test_clear(self, cache):
        """Should drop every entry"""
        cache.set("pve.lan", ["10.0.0.1"])
        cache.clear()
        assert cache.size() == 0
        assert cache.get("pve.lan") is None
