"""
Tests for the in-process enrichment cache.

A list-backed clock drives expiry.
"""

from tripweaver.infra.cache import EnrichmentCache, normalize_key


class TestNormalizeKey:
    """Tests for cache key normalization."""

    def test_case_and_whitespace(self):
        """Test that case and spacing variants share a key."""
        assert normalize_key("  Louvre   Museum ") == "louvre museum"
        assert normalize_key("LOUVRE\tMUSEUM") == "louvre museum"

    def test_parts_joined(self):
        """Test that empty parts are ignored."""
        assert normalize_key("place", None, "Louvre") == "place louvre"
        assert normalize_key() == ""


class TestEnrichmentCache:
    """Tests for EnrichmentCache."""

    def test_set_and_get(self):
        """Test basic storage and hit/miss counters."""
        cache = EnrichmentCache(capacity=10, ttl_seconds=0)

        assert cache.get("louvre") is None
        cache.set("louvre", "photo")

        assert cache.get("louvre") == "photo"
        assert "louvre" in cache
        assert len(cache) == 1
        assert cache.hits == 1
        assert cache.misses == 1

    def test_lru_eviction(self):
        """Test that the least recently used entry goes first."""
        cache = EnrichmentCache(capacity=2, ttl_seconds=0)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert len(cache) == 2

    def test_overwrite_refreshes(self):
        """Test that re-setting a key updates it in place."""
        cache = EnrichmentCache(capacity=2, ttl_seconds=0)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        cache.set("c", 3)

        assert cache.get("a") == 10
        assert "b" not in cache

    def test_ttl_expiry(self):
        """Test that entries expire with an injected clock."""
        now = [0.0]
        cache = EnrichmentCache(capacity=10, ttl_seconds=60, clock=lambda: now[0])
        cache.set("a", 1)

        now[0] = 59.0
        assert cache.get("a") == 1

        now[0] = 60.0
        assert "a" not in cache
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_no_ttl_keeps_entries(self):
        """Test that ttl 0 keeps entries for the process lifetime."""
        now = [0.0]
        cache = EnrichmentCache(capacity=10, ttl_seconds=0, clock=lambda: now[0])
        cache.set("a", 1)
        now[0] = 10**9

        assert cache.get("a") == 1

    def test_clear(self):
        """Test that clear drops entries and counters."""
        cache = EnrichmentCache(capacity=10, ttl_seconds=0)
        cache.set("a", 1)
        cache.get("a")
        cache.clear()

        assert len(cache) == 0
        assert cache.hits == 0
