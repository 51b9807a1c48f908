"""Tests for the in-memory key set cache."""

from __future__ import annotations

from tokensmith.cache import KeySetCache, MemoryKeySetCache


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_get_set() -> None:
    cache = MemoryKeySetCache()
    assert isinstance(cache, MemoryKeySetCache)
    assert cache.get("some-key") is None
    assert "some-key" not in cache

    value = {"some-kid": {"x5c": ["abc"]}}
    cache.set("some-key", value, 60)
    assert cache.get("some-key") == value
    assert "some-key" in cache
    assert len(cache) == 1

    cache.clear()
    assert cache.get("some-key") is None
    assert len(cache) == 0


def test_expiration() -> None:
    clock = FakeClock()
    cache = MemoryKeySetCache(timer=clock)
    cache.set("short", {"a": {}}, 10)
    cache.set("long", {"b": {}}, 100)

    clock.now += 9
    assert cache.get("short") == {"a": {}}
    clock.now += 1
    assert cache.get("short") is None
    assert cache.get("long") == {"b": {}}
    assert len(cache) == 1

    clock.now += 100
    assert cache.get("long") is None
    assert len(cache) == 0


def test_nonpositive_ttl() -> None:
    cache = MemoryKeySetCache()
    cache.set("zero", {"a": {}}, 0)
    cache.set("negative", {"a": {}}, -5)
    assert cache.get("zero") is None
    assert cache.get("negative") is None
    assert len(cache) == 0


def test_maxsize() -> None:
    cache = MemoryKeySetCache(maxsize=2)
    cache.set("first", {"a": {}}, 60)
    cache.set("second", {"b": {}}, 60)
    assert cache.get("first") == {"a": {}}
    cache.set("third", {"c": {}}, 60)

    assert cache.get("second") is None
    assert cache.get("first") == {"a": {}}
    assert cache.get("third") == {"c": {}}


def test_protocol() -> None:
    def store(cache: KeySetCache) -> None:
        cache.set("key", {"kid": {"x5c": ["abc"]}}, 60)

    cache = MemoryKeySetCache()
    store(cache)
    assert cache.get("key") == {"kid": {"x5c": ["abc"]}}
