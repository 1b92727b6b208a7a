"""Tests for the in-memory TTL cache."""

from recipe_nutrition.services.cache import InMemoryCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    cache.set("alias:rice", ["food-a"], ttl_seconds=60)

    clock.now = 59.9
    assert cache.get("alias:rice") == ["food-a"]

    clock.now = 60.0
    assert cache.get("alias:rice") is None
    assert len(cache) == 0
    assert (cache.hits, cache.misses) == (1, 1)


def test_least_recently_used_entry_is_evicted() -> None:
    cache = InMemoryCache(max_entries=2, clock=FakeClock())
    cache.set("a", 1, ttl_seconds=60)
    cache.set("b", 2, ttl_seconds=60)
    cache.get("a")

    cache.set("c", 3, ttl_seconds=60)

    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3


def test_clear() -> None:
    cache = InMemoryCache()
    cache.set("a", 1, ttl_seconds=60)
    cache.clear()
    assert cache.get("a") is None
