"""Tests for the in-memory cache, the null cache and cache keys."""

from triprouter.adapters.cache import InMemoryCache, NullCache, make_cache_key


class TestInMemoryCache:
    def test_set_then_get(self, clock):
        cache = InMemoryCache(clock=clock)
        cache.set("k", "v", ttl=60)
        assert cache.get("k") == "v"

    def test_expired_entry_is_absent_and_evicted(self, clock):
        cache = InMemoryCache(clock=clock)
        cache.set("k", "v", ttl=60)
        clock.advance(61)

        assert cache.get("k") is None
        assert cache.size() == 0

    def test_entry_without_ttl_never_expires(self, clock):
        cache = InMemoryCache(clock=clock)
        cache.set("k", "v")
        clock.advance(10**9)
        assert cache.get("k") == "v"

    def test_default_ttl_applies(self, clock):
        cache = InMemoryCache(clock=clock, default_ttl_seconds=5)
        cache.set("k", "v")
        clock.advance(6)
        assert cache.get("k") is None

    def test_eviction_is_least_recently_used(self, clock):
        cache = InMemoryCache(clock=clock, max_size=2)
        cache.set("a", 1)
        clock.advance(1)
        cache.set("b", 2)
        clock.advance(1)
        cache.get("a")  # "b" is now the least recently used
        clock.advance(1)
        cache.set("c", 3)

        assert cache.keys() == ["a", "c"]
        assert cache.stats()["evictions"] == 1

    def test_eviction_ties_fall_back_to_access_order(self, clock):
        cache = InMemoryCache(clock=clock, max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert sorted(cache.keys()) == ["a", "c"]

    def test_overwrite_at_capacity_does_not_evict(self, clock):
        cache = InMemoryCache(clock=clock, max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        assert cache.size() == 2
        assert cache.get("a") == 10

    def test_delete_and_invalidate(self, clock):
        cache = InMemoryCache(clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.delete("a") is True
        assert cache.delete("a") is False
        assert cache.invalidate("b") is True
        assert cache.size() == 0

    def test_clear_expired(self, clock):
        cache = InMemoryCache(clock=clock)
        cache.set("short", 1, ttl=1)
        cache.set("long", 2, ttl=100)
        clock.advance(2)

        assert cache.clear_expired() == 1
        assert cache.keys() == ["long"]

    def test_get_or_compute(self, clock):
        cache = InMemoryCache(clock=clock)
        calls = []

        def compute():
            calls.append(1)
            return "value"

        assert cache.get_or_compute("k", compute) == "value"
        assert cache.get_or_compute("k", compute) == "value"
        assert len(calls) == 1

    def test_stats(self, clock):
        cache = InMemoryCache(clock=clock, max_size=10)
        cache.set("k", "v")
        cache.get("k")
        cache.get("missing")
        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate_percent"] == 50.0

    def test_clear(self, clock):
        cache = InMemoryCache(clock=clock)
        cache.set("a", 1)
        assert cache.clear() == 1
        assert cache.size() == 0


class TestNullCache:
    def test_always_misses(self):
        cache = NullCache()
        cache.set("k", "v")
        assert cache.get("k") is None
        assert cache.size() == 0

    def test_get_or_compute_always_computes(self):
        cache = NullCache()
        calls = []
        cache.get_or_compute("k", lambda: calls.append(1))
        cache.get_or_compute("k", lambda: calls.append(1))
        assert len(calls) == 2


class TestMakeCacheKey:
    def test_order_independent(self):
        assert make_cache_key({"a": 1, "b": "x"}) == make_cache_key({"b": "x", "a": 1})

    def test_format(self):
        assert make_cache_key({"type": "flight", "date": "2025-06-01"}) == (
            "date:2025-06-01|type:flight"
        )

    def test_none_values_dropped(self):
        assert make_cache_key({"a": 1, "b": None}) == "a:1"

    def test_nested_values_serialized_as_sorted_json(self):
        key = make_cache_key({"filters": {"max": 5, "min": 1}})
        assert key == make_cache_key({"filters": {"min": 1, "max": 5}})
        assert key == 'filters:{"max":5,"min":1}'
