"""Tests for TTLCache and with_cache."""

import asyncio
import time

import pytest

from fpldash.services.cache import TTLCache, with_cache

BASE = 1_000_000.0  # seconds


@pytest.fixture
def clock(monkeypatch):
    """Frozen monotonic clock; call ``clock(seconds)`` to move it."""
    now = [BASE]
    monkeypatch.setattr(time, "monotonic", lambda: now[0])

    def _set(offset_seconds: float) -> None:
        now[0] = BASE + offset_seconds

    return _set


def test_set_and_get():
    cache = TTLCache(capacity=10, default_ttl=60_000)
    cache.set("k1", {"ids": [1, 2, 3]})
    assert cache.get("k1") == {"ids": [1, 2, 3]}


def test_get_missing_key_returns_default():
    cache = TTLCache()
    assert cache.get("nonexistent") is None
    assert cache.get("nonexistent", "absent") == "absent"


def test_expiry_boundary(clock):
    cache = TTLCache(capacity=10, default_ttl=10_000)
    cache.set("k1", "value")

    clock(5)
    assert cache.get("k1") == "value"

    # Exactly at expires_at is still a hit
    clock(10)
    assert cache.get("k1") == "value"

    clock(10.001)
    assert cache.get("k1") is None
    assert "k1" not in cache.keys()


def test_per_call_ttl_overrides_default(clock):
    cache = TTLCache(capacity=10, default_ttl=60_000)
    cache.set("short", 1, ttl=1_000)
    cache.set("long", 2)

    clock(2)
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_expired_entry_is_removed_from_both_indexes(clock):
    cache = TTLCache(capacity=10, default_ttl=1_000)
    cache.set("k1", "v")
    clock(2)
    assert cache.get("k1") is None
    assert "k1" not in cache._store
    assert "k1" not in cache._access


def test_has_follows_get_expiry(clock):
    cache = TTLCache(capacity=10, default_ttl=1_000)
    cache.set("k1", None)
    assert cache.has("k1")
    clock(1.5)
    assert not cache.has("k1")
    assert len(cache) == 0


def test_capacity_is_never_exceeded():
    cache = TTLCache(capacity=3, default_ttl=60_000)
    for i in range(20):
        cache.set(f"k{i}", i)
        assert len(cache) <= 3
    assert cache.keys() == ["k17", "k18", "k19"]


def test_lru_evicts_least_recently_accessed(clock):
    cache = TTLCache(capacity=2, default_ttl=60_000)
    cache.set("x", 1)
    clock(1)
    cache.set("y", 2)
    clock(2)
    assert cache.get("x") == 1
    clock(3)
    cache.set("z", 3)

    assert cache.get("y") is None
    assert cache.get("x") == 1
    assert cache.get("z") == 3


def test_lru_order_without_clock_movement():
    """Eviction order holds even when every access lands on the same millisecond."""
    cache = TTLCache(capacity=2, default_ttl=60_000)
    cache.set("x", 1)
    cache.set("y", 2)
    cache.get("x")
    cache.set("z", 3)
    assert not cache.has("y")
    assert cache.has("x")
    assert cache.has("z")


def test_overwrite_at_capacity_evicts_least_recent():
    cache = TTLCache(capacity=2, default_ttl=60_000)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("a", 10)
    assert cache.get("a") == 10
    assert not cache.has("b")
    assert len(cache) == 1


def test_expiry_ignores_wall_clock_steps(clock, monkeypatch):
    cache = TTLCache(capacity=10, default_ttl=1_000)
    wall = time.time()
    cache.set("k", 1)

    # wall clock jumps back an hour while monotonic time moves on 5 s
    monkeypatch.setattr(time, "time", lambda: wall - 3600)
    clock(5)
    assert cache.get("k") is None


def test_set_purges_expired_before_evicting(clock):
    cache = TTLCache(capacity=2, default_ttl=60_000)
    cache.set("stale", 1, ttl=1_000)
    cache.set("fresh", 2)
    clock(5)
    cache.set("new", 3)
    # the expired entry made room, so nothing live was evicted
    assert cache.get("fresh") == 2
    assert cache.get("new") == 3
    assert len(cache) == 2


def test_delete_is_idempotent():
    cache = TTLCache()
    assert cache.delete("nope") is False
    cache.set("k1", "val")
    assert cache.delete("k1") is True
    assert cache.delete("k1") is False
    assert cache.get("k1") is None
    assert "k1" not in cache._access


def test_clear():
    cache = TTLCache()
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()
    assert cache.get("a") is None
    assert cache.get("b") is None
    assert cache.size() == 0


def test_overwrite_replaces_value_and_expiry(clock):
    cache = TTLCache(capacity=10, default_ttl=10_000)
    cache.set("k1", "old")
    clock(8)
    cache.set("k1", "new")
    clock(15)
    assert cache.get("k1") == "new"


def test_purge_expired_counts(clock):
    cache = TTLCache(capacity=10, default_ttl=1_000)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3, ttl=60_000)
    clock(2)
    assert cache.purge_expired() == 2
    assert cache.keys() == ["c"]


def test_stats_snapshot(clock):
    cache = TTLCache(capacity=5, default_ttl=30_000, name="live")
    cache.set("a", 1)
    clock(3)
    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["capacity"] == 5
    assert stats["ttl"] == 30_000
    (entry,) = stats["entries"]
    assert entry["key"] == "a"
    assert entry["age"] == pytest.approx(3_000)
    assert entry["ttl"] == pytest.approx(30_000)
    assert entry["expires_at"] > entry["created_at"]


def test_invalid_construction():
    with pytest.raises(ValueError):
        TTLCache(capacity=0)
    with pytest.raises(ValueError):
        TTLCache(default_ttl=0)


# ── with_cache ──


async def test_with_cache_fetches_once():
    cache = TTLCache(capacity=10, default_ttl=60_000)
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        return {"events": [1, 2]}

    first = await with_cache(cache, "bootstrap-static", fetch)
    second = await with_cache(cache, "bootstrap-static", fetch)
    assert calls == 1
    assert first == second == {"events": [1, 2]}


async def test_with_cache_caches_none():
    cache = TTLCache()
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        return None

    assert await with_cache(cache, "k", fetch) is None
    assert await with_cache(cache, "k", fetch) is None
    assert calls == 1


async def test_with_cache_failure_is_not_cached():
    cache = TTLCache()
    attempts = 0

    async def flaky():
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("upstream down")
        return "ok"

    with pytest.raises(RuntimeError, match="upstream down"):
        await with_cache(cache, "k", flaky)
    assert not cache.has("k")

    assert await with_cache(cache, "k", flaky) == "ok"
    assert await with_cache(cache, "k", flaky) == "ok"
    assert attempts == 2


async def test_with_cache_uses_custom_ttl(clock):
    cache = TTLCache(capacity=10, default_ttl=60_000)

    async def fetch():
        return "v"

    await with_cache(cache, "k", fetch, ttl=1_000)
    clock(2)
    assert cache.get("k") is None


async def test_with_cache_concurrent_misses_both_fetch():
    """No single-flight: overlapping misses each call fetch, last write wins."""
    cache = TTLCache()
    release = asyncio.Event()
    calls = []

    async def fetch(tag):
        calls.append(tag)
        await release.wait()
        return tag

    t1 = asyncio.create_task(with_cache(cache, "k", lambda: fetch("first")))
    t2 = asyncio.create_task(with_cache(cache, "k", lambda: fetch("second")))
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(t1, t2)

    assert calls == ["first", "second"]
    assert results == ["first", "second"]
    assert cache.get("k") == "second"
