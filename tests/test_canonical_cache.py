from __future__ import annotations

import threading

import pytest

from metadata.canonical_cache import LRUCache


@pytest.mark.parametrize("capacity", [1, 2, 5, 100])
def test_overflow_evicts_first_inserted_key(capacity) -> None:
    cache = LRUCache(capacity)
    for i in range(capacity + 1):
        cache.put(f"k{i}", i)

    assert cache.get("k0") is None
    assert len(cache) == capacity
    for i in range(1, capacity + 1):
        assert cache.get(f"k{i}") == i


def test_get_refreshes_recency() -> None:
    cache = LRUCache(3)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("c", 3)

    assert cache.get("a") == 1
    cache.put("d", 4)

    assert "a" in cache
    assert "b" not in cache
    assert cache.keys() == ["c", "a", "d"]


def test_put_overwrites_and_marks_most_recent() -> None:
    cache = LRUCache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("a", 10)
    cache.put("c", 3)

    assert cache.get("a") == 10
    assert cache.get("b") is None
    assert len(cache) == 2


def test_contains_does_not_touch_recency() -> None:
    cache = LRUCache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    assert "a" in cache
    cache.put("c", 3)
    assert "a" not in cache


def test_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        LRUCache(0)


def test_concurrent_puts_keep_capacity() -> None:
    cache = LRUCache(50)

    def _writer(offset):
        for i in range(200):
            cache.put(f"{offset}-{i}", i)
            cache.get(f"{offset}-{i // 2}")

    threads = [threading.Thread(target=_writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 50
    assert len(set(cache.keys())) == 50
