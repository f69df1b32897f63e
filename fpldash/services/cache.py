"""Bounded in-memory TTL cache with LRU eviction.

Expiry and access order run on the monotonic clock in milliseconds; the
wall clock is only used for the datetimes in ``stats``. Expiry is lazy on
read and eager on write; the registry sweep only reclaims memory.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING: Any = object()


def now_ms() -> float:
    return time.monotonic() * 1000


def wall_ms() -> float:
    return time.time() * 1000


def _to_datetime(ms: float) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    key: str
    value: T
    created_at: float  # wall clock, for stats only
    stored_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class TTLCache(Generic[T]):
    """In-memory cache with a default TTL and a hard entry cap.

    When full, ``set`` evicts the entry with the oldest last access.
    """

    def __init__(self, capacity: int = 1000, default_ttl: int = 60_000, name: str = "") -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if default_ttl <= 0:
            raise ValueError("default_ttl must be > 0")
        self.capacity = capacity
        self.default_ttl = default_ttl
        self.name = name
        self._store: dict[str, CacheEntry[T]] = {}
        # key -> last access ms, oldest first
        self._access: OrderedDict[str, float] = OrderedDict()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return (
            f"TTLCache(name={self.name!r}, size={len(self._store)}, "
            f"capacity={self.capacity}, default_ttl={self.default_ttl})"
        )

    def _remove(self, key: str) -> bool:
        self._access.pop(key, None)
        return self._store.pop(key, None) is not None

    def _evict_lru(self) -> None:
        if not self._access:
            return
        oldest, _ = self._access.popitem(last=False)
        self._store.pop(oldest, None)
        log.debug("Evicted %s from %s cache", oldest, self.name or "unnamed")

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = now_ms()
        with self._lock:
            expired = [k for k, e in self._store.items() if e.is_expired(now)]
            for key in expired:
                self._remove(key)
        return len(expired)

    def set(self, key: str, value: T, ttl: int | None = None) -> None:
        assert key, "cache key must be non-empty"
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self.purge_expired()
            if len(self._store) >= self.capacity:
                self._evict_lru()
            now = now_ms()
            self._store[key] = CacheEntry(
                key=key,
                value=value,
                created_at=wall_ms(),
                stored_at=now,
                expires_at=now + ttl,
            )
            self._access[key] = now
            self._access.move_to_end(key)

    def get(self, key: str, default: Any = None) -> T | Any:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return default
            now = now_ms()
            if entry.is_expired(now):
                self._remove(key)
                return default
            self._access[key] = now
            self._access.move_to_end(key)
            return entry.value

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._remove(key)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._access.clear()

    def size(self) -> int:
        self.purge_expired()
        return len(self._store)

    def keys(self) -> list[str]:
        with self._lock:
            self.purge_expired()
            return list(self._store)

    def stats(self) -> dict[str, Any]:
        """Diagnostic snapshot of live entries."""
        with self._lock:
            self.purge_expired()
            now = now_ms()
            entries = [
                {
                    "key": e.key,
                    "created_at": _to_datetime(e.created_at),
                    "expires_at": _to_datetime(e.created_at + e.expires_at - e.stored_at),
                    "age": now - e.stored_at,
                    "ttl": e.expires_at - e.stored_at,
                }
                for e in self._store.values()
            ]
        return {
            "size": len(entries),
            "capacity": self.capacity,
            "ttl": self.default_ttl,
            "entries": entries,
        }


async def with_cache(
    cache: TTLCache[T],
    key: str,
    fetch: Callable[[], Awaitable[T]],
    ttl: int | None = None,
) -> T:
    """Return the cached value for *key*, or await *fetch* and cache it.

    Failures propagate and leave the cache untouched. Concurrent misses
    for the same key each call *fetch*; the last one to finish wins.
    """
    cached = cache.get(key, _MISSING)
    if cached is not _MISSING:
        log.debug("Cache hit: %s", key)
        return cached
    log.debug("Cache miss: %s", key)
    value = await fetch()
    cache.set(key, value, ttl)
    return value
