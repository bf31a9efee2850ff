import base64
import hashlib
import itertools
from concurrent.futures import ThreadPoolExecutor

import pytest

from episode_recognizer.core.cache import ResultCache, generate_cache_key, normalize_for_cache
from episode_recognizer.utils.filename_parser import MatchResult


def _result(season=1, episode=1):
    return MatchResult(season=season, episodes=[episode])


class TestCacheKey:
    def test_stable_and_fixed_length(self):
        key = generate_cache_key("filename", "Show.S01E02.mkv", "Show")
        assert key == generate_cache_key("filename", "Show.S01E02.mkv", "Show")
        assert key.startswith("filename_")
        assert len(key) == len("filename_") + 64

    def test_prefix_and_showname_change_key(self):
        base = generate_cache_key("filename", "a.mkv", "Show")
        assert generate_cache_key("hybrid", "a.mkv", "Show") != base
        assert generate_cache_key("filename", "a.mkv", "Other") != base

    def test_missing_showname_is_null(self):
        assert generate_cache_key("ai", "a.mkv", None) == generate_cache_key("ai", "a.mkv", "null")

    def test_empty_showname_differs_from_missing(self):
        assert generate_cache_key("ai", "a.mkv", "") != generate_cache_key("ai", "a.mkv", None)

    def test_invisible_and_composed_characters_normalized(self):
        assert generate_cache_key("ai", "a\u200b.mkv") == generate_cache_key("ai", "a.mkv")
        assert generate_cache_key("ai", "e\u0301.mkv") == generate_cache_key("ai", "\u00e9.mkv")

    def test_normalize_truncates(self):
        assert len(normalize_for_cache("x" * 1000)) == 500

    def test_base64_fallback_when_hash_unavailable(self, monkeypatch):
        def broken_sha256(*args, **kwargs):
            raise ValueError("unsupported hash type")

        monkeypatch.setattr(hashlib, "sha256", broken_sha256)
        key = generate_cache_key("filename", "a.mkv", None)
        encoded = base64.urlsafe_b64encode(b"a.mkv").decode("ascii")
        assert key == f"filename:{encoded}:null"


class TestResultCache:
    def test_get_and_put(self, cache):
        assert cache.get("k") is None
        result = _result()
        cache.put("k", result)
        assert cache.get("k") == result
        assert cache.hits == 1
        assert cache.misses == 1
        assert cache.hit_rate == pytest.approx(50.0)

    def test_stored_result_is_isolated_from_callers(self, cache):
        result = _result(season=1, episode=2)
        cache.put("k", result)
        result.episodes.append(99)
        returned = cache.get("k")
        assert returned.episodes == [2]
        returned.episodes.append(100)
        returned.season = 5
        again = cache.get("k")
        assert again.season == 1
        assert again.episodes == [2]

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            ResultCache(max_size=0)

    def test_expired_entry_is_a_miss(self, cache, clock):
        cache.put("k", _result())
        clock.advance(24 * 60 * 60 + 1)
        assert cache.get("k") is None
        assert cache.misses == 1
        assert cache.size == 0

    def test_purge_expired(self, cache, clock):
        cache.put("old", _result())
        clock.advance(24 * 60 * 60 + 1)
        cache.put("new", _result())
        assert cache.purge_expired() == 1
        assert "new" in cache
        assert "old" not in cache


class TestEviction:
    def test_evicts_down_to_eighty_percent(self, clock):
        cache = ResultCache(max_size=10, clock=clock)
        for i in range(10):
            cache.put(f"k{i}", _result(episode=i + 1))
        clock.advance(120)
        cache.put("k10", _result())
        assert cache.size == 9
        assert cache.evictions == 2

    def test_hot_entries_survive(self, clock):
        cache = ResultCache(max_size=10, clock=clock)
        for i in range(10):
            cache.put(f"k{i}", _result(episode=i + 1))
        clock.advance(120)
        cache.get("k0")
        cache.get("k0")
        clock.advance(120)
        cache.put("k10", _result())
        assert "k0" in cache
        assert "k1" not in cache
        assert "k2" not in cache
        assert "k3" in cache

    def test_recent_entries_are_never_evicted(self, clock):
        cache = ResultCache(max_size=3, clock=clock)
        for i in range(4):
            cache.put(f"k{i}", _result())
        assert cache.size == 4
        assert cache.evictions == 0

    def test_hot_hit_counted_before_access(self, cache, clock):
        cache.put("k", _result())
        cache.get("k")
        assert cache.hot_hits == 1
        clock.advance(120)
        cache.get("k")
        assert cache.hot_hits == 1
        clock.advance(120)
        cache.get("k")
        assert cache.hot_hits == 2


class TestAdministration:
    def test_clear_ai_entries_only_touches_ai_and_hybrid(self, cache):
        cache.put(generate_cache_key("ai", "a.mkv", "Show"), _result())
        cache.put(generate_cache_key("hybrid", "a.mkv", "Show"), _result())
        filename_key = generate_cache_key("filename", "a.mkv", "Show")
        cache.put(filename_key, _result())
        assert cache.clear_ai_entries() == 2
        assert cache.size == 1
        assert filename_key in cache

    def test_clear(self, cache):
        cache.put("a", _result())
        cache.put("b", _result())
        assert cache.clear() == 2
        assert cache.size == 0

    def test_statistics_and_reset(self, cache):
        cache.put("k", _result())
        cache.get("k")
        cache.get("missing")
        assert cache.statistics() == "Cache: 1 entries, Hits: 1, Misses: 1, Hit rate: 50.0%"
        cache.reset_statistics()
        assert cache.hits == 0
        assert cache.misses == 0
        assert cache.hit_rate == 0.0


class TestConcurrency:
    THREADS = 8
    LOOKUPS_PER_THREAD = 400
    KEYS_PER_THREAD = 30

    def test_parallel_workers_keep_counters_and_capacity(self):
        ticks = itertools.count()
        cache = ResultCache(max_size=40, ttl=10 ** 12, clock=lambda: next(ticks) * 100.0)

        def worker(index):
            prefix = "ai" if index % 2 else "filename"
            for i in range(self.LOOKUPS_PER_THREAD):
                key = f"{prefix}_{index}_{i % self.KEYS_PER_THREAD}"
                if cache.get(key) is None:
                    cache.put(key, _result(season=index, episode=i))
                if index % 2 and i % 50 == 49:
                    cache.clear_ai_entries()

        with ThreadPoolExecutor(max_workers=self.THREADS) as pool:
            for future in [pool.submit(worker, n) for n in range(self.THREADS)]:
                future.result()

        assert cache.hits + cache.misses == self.THREADS * self.LOOKUPS_PER_THREAD
        now = next(ticks) * 100.0
        cold_entries = [entry for entry in cache._store.values() if not entry.is_hot(now)]
        assert len(cold_entries) <= cache.max_size
