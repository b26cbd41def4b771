"""Tests for the analysis cache."""

import pytest

from cipherscope.services.cache import AnalysisCache


class TestAnalysisCache:
    """Test suite for the LRU cache."""

    @pytest.fixture
    def cache(self):
        return AnalysisCache(max_size=2)

    def test_put_and_get(self, cache):
        cache.put("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache
        assert len(cache) == 1

    def test_miss_returns_none(self, cache):
        assert cache.get("missing") is None
        assert cache.stats.misses == 1

    def test_least_recently_used_is_evicted(self, cache):
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")
        cache.put("c", 3)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert cache.stats.evictions == 1

    def test_overwrite_does_not_evict(self, cache):
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("a", 10)
        assert cache.get("a") == 10
        assert len(cache) == 2
        assert cache.stats.evictions == 0

    def test_hit_rate(self, cache):
        cache.put("a", 1)
        cache.get("a")
        cache.get("b")
        assert cache.stats.hits == 1
        assert cache.stats.hit_rate == pytest.approx(0.5)

    def test_zero_size_stores_nothing(self):
        cache = AnalysisCache(max_size=0)
        cache.put("a", 1)
        assert len(cache) == 0

    def test_clear(self, cache):
        cache.put("a", 1)
        cache.clear()
        assert len(cache) == 0

    def test_fingerprint_depends_on_options(self):
        plain = AnalysisCache.fingerprint("text")
        with_options = AnalysisCache.fingerprint("text", "True:None")
        assert plain != with_options
        assert AnalysisCache.fingerprint("text", "True:None") == with_options
        assert AnalysisCache.fingerprint("other", "True:None") != with_options
