# tests/test_cache.py
"""Tests for the bounded result cache."""
import threading

import pytest

from cmdsense.cache import ResultCache, fingerprint


def test_round_trip():
    cache = ResultCache(capacity=3)
    cache.put("search:git:/tmp", ["git status"])

    value, found = cache.get("search:git:/tmp")

    assert found is True
    assert value == ["git status"]


def test_missing_key():
    cache = ResultCache(capacity=3)

    value, found = cache.get("nope")

    assert found is False
    assert value is None


def test_cached_none_is_a_hit():
    """A stored None is distinguishable from a miss."""
    cache = ResultCache(capacity=3)
    cache.put("k", None)

    assert cache.get("k") == (None, True)


def test_fifo_eviction_after_capacity_plus_one_puts():
    cache = ResultCache(capacity=3)
    for i in range(4):
        cache.put(f"k{i}", i)

    assert len(cache) == 3
    assert "k0" not in cache
    assert cache.keys() == ["k1", "k2", "k3"]
    assert cache.stats.evictions == 1


def test_reads_do_not_change_eviction_order():
    cache = ResultCache(capacity=2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.get("a")
    cache.get("a")

    cache.put("c", 3)

    assert "a" not in cache
    assert cache.keys() == ["b", "c"]


def test_reput_replaces_value_and_keeps_position():
    cache = ResultCache(capacity=2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("a", 10)

    assert cache.get("a") == (10, True)
    assert cache.keys() == ["a", "b"]
    assert cache.stats.evictions == 0

    cache.put("c", 3)
    assert "a" not in cache


def test_invalidate_prefix():
    cache = ResultCache(capacity=10)
    cache.put("search:git:/a", 1)
    cache.put("search:ls:/a", 2)
    cache.put("patterns:bash:/a:x", 3)

    removed = cache.invalidate_prefix("search:")

    assert removed == 2
    assert cache.keys() == ["patterns:bash:/a:x"]
    assert cache.invalidate_prefix("search:") == 0


def test_invalidated_slots_are_reused():
    cache = ResultCache(capacity=2)
    cache.put("search:a", 1)
    cache.put("complete:b", 2)
    cache.invalidate_prefix("search:")

    cache.put("search:c", 3)

    assert cache.keys() == ["complete:b", "search:c"]
    assert cache.stats.evictions == 0


def test_clear():
    cache = ResultCache(capacity=2)
    cache.put("a", 1)
    cache.clear()

    assert len(cache) == 0
    assert cache.get("a") == (None, False)


@pytest.mark.parametrize("capacity", [0, -1])
def test_invalid_capacity(capacity):
    with pytest.raises(ValueError):
        ResultCache(capacity=capacity)


def test_stats_count_hits_and_misses():
    cache = ResultCache(capacity=2)
    cache.put("a", 1)
    cache.get("a")
    cache.get("b")

    stats = cache.stats
    assert stats.hits == 1
    assert stats.misses == 1
    assert stats.hit_rate == 50.0


def test_concurrent_puts_respect_capacity():
    cache = ResultCache(capacity=50)

    def writer(offset):
        for i in range(200):
            cache.put(f"{offset}:{i}", i)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 50
    assert len(cache.keys()) == 50


def test_fingerprint_is_order_sensitive():
    assert fingerprint(["a", "b"]) == fingerprint(["a", "b"])
    assert fingerprint(["a", "b"]) != fingerprint(["b", "a"])
    assert fingerprint(["ab"]) != fingerprint(["a", "b"])
