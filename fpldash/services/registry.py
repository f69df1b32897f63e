"""Named cache instances shared by the data layer, plus the expiry sweep."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterator

from fpldash.config import CacheConfig, Settings
from fpldash.services.cache import TTLCache

log = logging.getLogger(__name__)

CACHE_NAMES = ("bootstrap", "fixtures", "live", "standings", "entry", "element_summary")


class CacheRegistry:
    """One TTLCache per data category.

    Build it once at startup and hand it to whatever issues fetches.
    """

    def __init__(self, configs: dict[str, CacheConfig], sweep_interval: float = 300.0) -> None:
        self._caches: dict[str, TTLCache[Any]] = {
            name: TTLCache(capacity=cfg.capacity, default_ttl=cfg.ttl_ms, name=name)
            for name, cfg in configs.items()
        }
        self.sweep_interval = sweep_interval
        self._sweep_task: asyncio.Task | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> CacheRegistry:
        missing = [n for n in CACHE_NAMES if n not in settings.caches]
        if missing:
            raise ValueError(f"Missing cache config for: {', '.join(missing)}")
        return cls(settings.caches, sweep_interval=settings.sweep_interval)

    def __getitem__(self, name: str) -> TTLCache[Any]:
        return self._caches[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._caches)

    def __len__(self) -> int:
        return len(self._caches)

    @property
    def bootstrap(self) -> TTLCache[Any]:
        return self._caches["bootstrap"]

    @property
    def fixtures(self) -> TTLCache[Any]:
        return self._caches["fixtures"]

    @property
    def live(self) -> TTLCache[Any]:
        return self._caches["live"]

    @property
    def standings(self) -> TTLCache[Any]:
        return self._caches["standings"]

    @property
    def entry(self) -> TTLCache[Any]:
        return self._caches["entry"]

    @property
    def element_summary(self) -> TTLCache[Any]:
        return self._caches["element_summary"]

    def sweep(self) -> int:
        """Purge expired entries from every instance."""
        removed = sum(cache.purge_expired() for cache in self._caches.values())
        if removed:
            log.info("Cache cleanup: removed %d expired entries", removed)
        return removed

    def clear_by_pattern(self, pattern: str) -> int:
        """Delete every key containing *pattern*, across all instances."""
        removed = 0
        for cache in self._caches.values():
            for key in cache.keys():
                if pattern in key and cache.delete(key):
                    removed += 1
        return removed

    def clear_all(self) -> None:
        for cache in self._caches.values():
            cache.clear()

    def stats(self) -> dict[str, dict[str, Any]]:
        return {name: cache.stats() for name, cache in self._caches.items()}

    # ── Background sweep ──

    @property
    def sweeping(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start_sweep(self, interval: float | None = None) -> None:
        """Run ``sweep`` every *interval* seconds on the running loop.

        Calling again restarts the task with the new interval.
        """
        if interval is not None:
            self.sweep_interval = interval
        self.stop_sweep()
        self._sweep_task = asyncio.get_running_loop().create_task(
            self._sweep_loop(), name="cache-sweep"
        )

    def stop_sweep(self) -> None:
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            self._sweep_task = None

    shutdown = stop_sweep

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                self.sweep()
            except Exception:
                log.exception("Cache sweep failed")
