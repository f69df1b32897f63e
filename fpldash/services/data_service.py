"""Orchestrator: cached FPL fetches and bootstrap-derived lookups."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime
from typing import Any

from fpldash.api.client import FPLClient
from fpldash.api.endpoints import (
    get_bootstrap,
    get_classic_standings,
    get_element_summary,
    get_entry,
    get_entry_event,
    get_entry_history,
    get_entry_transfers,
    get_fixtures,
    get_live_gw,
    valid_entry_id,
    valid_gameweek,
    valid_league_id,
    valid_player_id,
    valid_team_id,
)
from fpldash.api.models import (
    Bootstrap,
    ElementSummary,
    Entry,
    EntryEvent,
    EntryHistory,
    Fixture,
    Gameweek,
    LeagueStandings,
    LiveGw,
    Player,
    Team,
    Transfer,
)
from fpldash.config import Settings
from fpldash.services import cache_keys
from fpldash.services.cache import with_cache
from fpldash.services.rate_limit import RateLimiter
from fpldash.services.registry import CacheRegistry

log = logging.getLogger(__name__)


def _check(ok: bool, what: str, value: int) -> None:
    if not ok:
        raise ValueError(f"Invalid {what}: {value}")


class FPLDataService:
    """Routes every FPL fetch through the matching cache instance."""

    def __init__(
        self,
        settings: Settings,
        client: FPLClient | None = None,
        caches: CacheRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.client = client or FPLClient(
            settings.base_url,
            user_agent=settings.user_agent,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            retry_base_delay=settings.retry_base_delay,
            rate_limiter=RateLimiter(
                settings.rate_limit_requests, settings.rate_limit_window
            ),
        )
        self.caches = caches if caches is not None else CacheRegistry.from_settings(settings)

    async def close(self) -> None:
        self.caches.stop_sweep()
        await self.client.close()

    # ── Public data ──

    async def fetch_bootstrap(self) -> Bootstrap:
        return await with_cache(
            self.caches.bootstrap,
            cache_keys.bootstrap(),
            lambda: get_bootstrap(self.client),
        )

    async def fetch_fixtures(self) -> list[Fixture]:
        return await with_cache(
            self.caches.fixtures,
            cache_keys.fixtures(),
            lambda: get_fixtures(self.client),
        )

    async def fetch_live_gw(self, gw: int) -> LiveGw:
        _check(valid_gameweek(gw), "gameweek", gw)
        return await with_cache(
            self.caches.live,
            cache_keys.live_gw(gw),
            lambda: get_live_gw(self.client, gw),
            self.settings.live_ttl_ms,
        )

    async def fetch_classic_standings(self, league_id: int, page: int = 1) -> LeagueStandings:
        _check(valid_league_id(league_id), "league id", league_id)
        _check(page >= 1, "page", page)
        return await with_cache(
            self.caches.standings,
            cache_keys.standings(league_id, page),
            lambda: get_classic_standings(self.client, league_id, page=page),
            self.settings.standings_ttl_ms,
        )

    async def fetch_element_summary(self, player_id: int) -> ElementSummary:
        _check(valid_player_id(player_id), "player id", player_id)
        return await with_cache(
            self.caches.element_summary,
            cache_keys.element_summary(player_id),
            lambda: get_element_summary(self.client, player_id),
            self.settings.element_summary_ttl_ms,
        )

    # ── Entry data (shorter TTL when fetched with session cookies) ──

    def _entry_ttl(self, cookies: str | None) -> int:
        s = self.settings
        return s.entry_auth_ttl_ms if cookies else s.entry_ttl_ms

    async def fetch_entry(self, entry_id: int, cookies: str | None = None) -> Entry:
        _check(valid_entry_id(entry_id), "entry id", entry_id)
        return await with_cache(
            self.caches.entry,
            cache_keys.entry(entry_id, auth=bool(cookies)),
            lambda: get_entry(self.client, entry_id, cookies=cookies),
            self._entry_ttl(cookies),
        )

    async def fetch_entry_history(self, entry_id: int, cookies: str | None = None) -> EntryHistory:
        _check(valid_entry_id(entry_id), "entry id", entry_id)
        s = self.settings
        ttl = s.entry_history_auth_ttl_ms if cookies else s.entry_history_ttl_ms
        return await with_cache(
            self.caches.entry,
            cache_keys.entry_history(entry_id, auth=bool(cookies)),
            lambda: get_entry_history(self.client, entry_id, cookies=cookies),
            ttl,
        )

    async def fetch_entry_event(
        self, entry_id: int, gw: int, cookies: str | None = None
    ) -> EntryEvent:
        _check(valid_entry_id(entry_id), "entry id", entry_id)
        _check(valid_gameweek(gw), "gameweek", gw)
        return await with_cache(
            self.caches.entry,
            cache_keys.entry_event(entry_id, gw, auth=bool(cookies)),
            lambda: get_entry_event(self.client, entry_id, gw, cookies=cookies),
            self._entry_ttl(cookies),
        )

    async def fetch_entry_transfers(
        self, entry_id: int, cookies: str | None = None
    ) -> list[Transfer]:
        _check(valid_entry_id(entry_id), "entry id", entry_id)
        return await with_cache(
            self.caches.entry,
            cache_keys.entry_transfers(entry_id, auth=bool(cookies)),
            lambda: get_entry_transfers(self.client, entry_id, cookies=cookies),
            self._entry_ttl(cookies),
        )

    # ── Batches ──

    async def fetch_multiple_entries(
        self, entry_ids: list[int], cookies: str | None = None
    ) -> list[Entry | None]:
        """Fetch entries concurrently; failures become ``None``."""

        async def _fetch_one(entry_id: int) -> Entry | None:
            try:
                return await self.fetch_entry(entry_id, cookies)
            except Exception as exc:
                log.warning("Failed to fetch entry %s: %s", entry_id, exc)
                return None

        return list(await asyncio.gather(*[_fetch_one(eid) for eid in entry_ids]))

    async def fetch_multiple_entry_events(
        self, entry_ids: list[int], gw: int, cookies: str | None = None
    ) -> list[EntryEvent | None]:
        async def _fetch_one(entry_id: int) -> EntryEvent | None:
            try:
                return await self.fetch_entry_event(entry_id, gw, cookies)
            except Exception as exc:
                log.warning("Failed to fetch entry event %s/%s: %s", entry_id, gw, exc)
                return None

        return list(await asyncio.gather(*[_fetch_one(eid) for eid in entry_ids]))

    async def fetch_league_entries(
        self, league_id: int, cookies: str | None = None
    ) -> tuple[LeagueStandings, list[Entry | None]]:
        """First page of standings plus every entry on it."""
        standings = await self.fetch_classic_standings(league_id)
        entries = await self.fetch_multiple_entries(standings.entry_ids(), cookies)
        return standings, entries

    # ── Bootstrap lookups ──

    async def _bootstrap_or_none(self, what: str) -> Bootstrap | None:
        try:
            return await self.fetch_bootstrap()
        except Exception as exc:
            log.warning("Failed to get %s: %s", what, exc)
            return None

    async def get_current_gameweek(self) -> int:
        bootstrap = await self._bootstrap_or_none("current gameweek")
        current = bootstrap.current_event() if bootstrap else None
        return current.id if current else 1

    async def get_next_gameweek(self) -> int | None:
        bootstrap = await self._bootstrap_or_none("next gameweek")
        nxt = bootstrap.next_event() if bootstrap else None
        return nxt.id if nxt else None

    async def _gameweek(self, gw: int, what: str) -> Gameweek | None:
        bootstrap = await self._bootstrap_or_none(what)
        return bootstrap.event(gw) if bootstrap else None

    async def is_gameweek_finished(self, gw: int) -> bool:
        event = await self._gameweek(gw, "gameweek status")
        return event.finished if event else False

    async def get_gameweek_deadline(self, gw: int) -> datetime | None:
        event = await self._gameweek(gw, "gameweek deadline")
        return event.deadline_time if event else None

    async def get_player_by_id(self, player_id: int) -> Player | None:
        bootstrap = await self._bootstrap_or_none("player by id")
        if bootstrap is None:
            return None
        return next((p for p in bootstrap.elements if p.id == player_id), None)

    async def get_players_by_team(self, team_id: int) -> list[Player]:
        bootstrap = await self._bootstrap_or_none("players by team")
        if bootstrap is None:
            return []
        return [p for p in bootstrap.elements if p.team == team_id]

    async def get_players_by_position(self, position_id: int) -> list[Player]:
        bootstrap = await self._bootstrap_or_none("players by position")
        if bootstrap is None:
            return []
        return [p for p in bootstrap.elements if p.element_type == position_id]

    async def get_team_by_id(self, team_id: int) -> Team | None:
        if not valid_team_id(team_id):
            return None
        bootstrap = await self._bootstrap_or_none("team by id")
        if bootstrap is None:
            return None
        return next((t for t in bootstrap.teams if t.id == team_id), None)

    async def get_all_teams(self) -> list[Team]:
        bootstrap = await self._bootstrap_or_none("all teams")
        return bootstrap.teams if bootstrap else []

    async def gameweek_summary(self) -> dict[str, Any]:
        """Current/next gameweek overview; raises if bootstrap is unavailable."""
        bootstrap = await self.fetch_bootstrap()
        current = bootstrap.current_event()
        nxt = bootstrap.next_event()
        return {
            "current_gameweek": current.id if current else None,
            "current_gameweek_name": current.name if current else None,
            "current_gameweek_finished": current.finished if current else False,
            "next_gameweek": nxt.id if nxt else None,
            "next_gameweek_name": nxt.name if nxt else None,
            "events": [
                {"id": e.id, "name": e.name, "is_current": e.is_current,
                 "is_next": e.is_next, "finished": e.finished}
                for e in bootstrap.events
            ],
        }

    # ── Diagnostics ──

    async def health_check(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": "ok", "endpoints": {}, "latency": {}}
        checks = {"bootstrap": self.fetch_bootstrap, "fixtures": self.fetch_fixtures}
        for name, check in checks.items():
            start = time.perf_counter()
            try:
                await check()
                result["endpoints"][name] = True
            except Exception as exc:
                log.warning("Health check failed for %s: %s", name, exc)
                result["endpoints"][name] = False
                result["status"] = "error"
            result["latency"][name] = round((time.perf_counter() - start) * 1000)
        return result

    def force_refresh(self, pattern: str) -> int:
        """Drop cached keys containing *pattern* to force fresh fetches."""
        removed = self.caches.clear_by_pattern(pattern)
        log.info("Force refresh %r removed %d cached entries", pattern, removed)
        return removed
