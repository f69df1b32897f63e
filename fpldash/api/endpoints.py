"""Path builders, id validators and typed fetch functions for the FPL API."""

from __future__ import annotations

from fpldash.api.client import FPLClient
from fpldash.api.models import (
    Bootstrap,
    ElementSummary,
    Entry,
    EntryEvent,
    EntryHistory,
    Fixture,
    LeagueStandings,
    LiveGw,
    Transfer,
)

MAX_GAMEWEEK = 38


# ── Paths (relative to the client's base URL) ──

def bootstrap_path() -> str:
    return "/bootstrap-static/"


def fixtures_path() -> str:
    return "/fixtures/"


def live_gw_path(gw: int) -> str:
    return f"/event/{gw}/live/"


def classic_league_path(league_id: int) -> str:
    return f"/leagues-classic/{league_id}/standings/"


def element_summary_path(player_id: int) -> str:
    return f"/element-summary/{player_id}/"


def entry_path(entry_id: int) -> str:
    return f"/entry/{entry_id}/"


def entry_history_path(entry_id: int) -> str:
    return f"/entry/{entry_id}/history/"


def entry_event_path(entry_id: int, gw: int) -> str:
    return f"/entry/{entry_id}/event/{gw}/picks/"


def entry_transfers_path(entry_id: int) -> str:
    return f"/entry/{entry_id}/transfers/"


# ── Validators ──

def valid_gameweek(gw: int) -> bool:
    return 1 <= gw <= MAX_GAMEWEEK


def valid_entry_id(entry_id: int) -> bool:
    return 0 < entry_id < 10_000_000


def valid_league_id(league_id: int) -> bool:
    return league_id > 0


def valid_player_id(player_id: int) -> bool:
    return 0 < player_id < 1000


def valid_team_id(team_id: int) -> bool:
    return 1 <= team_id <= 20


# ── Fetchers ──

async def get_bootstrap(client: FPLClient) -> Bootstrap:
    """Teams, players and gameweeks for the season."""
    data = await client.get(bootstrap_path())
    return Bootstrap(**data)


async def get_fixtures(client: FPLClient) -> list[Fixture]:
    data = await client.get(fixtures_path())
    return [Fixture(**f) for f in data]


async def get_live_gw(client: FPLClient, gw: int) -> LiveGw:
    data = await client.get(live_gw_path(gw))
    return LiveGw(**data)


async def get_classic_standings(
    client: FPLClient, league_id: int, *, page: int = 1
) -> LeagueStandings:
    data = await client.get(
        classic_league_path(league_id), params={"page_standings": page}
    )
    return LeagueStandings(**data)


async def get_element_summary(client: FPLClient, player_id: int) -> ElementSummary:
    data = await client.get(element_summary_path(player_id))
    return ElementSummary(**data)


async def get_entry(client: FPLClient, entry_id: int, *, cookies: str | None = None) -> Entry:
    data = await client.get(entry_path(entry_id), cookies=cookies)
    return Entry(**data)


async def get_entry_history(
    client: FPLClient, entry_id: int, *, cookies: str | None = None
) -> EntryHistory:
    data = await client.get(entry_history_path(entry_id), cookies=cookies)
    return EntryHistory(**data)


async def get_entry_event(
    client: FPLClient, entry_id: int, gw: int, *, cookies: str | None = None
) -> EntryEvent:
    data = await client.get(entry_event_path(entry_id, gw), cookies=cookies)
    return EntryEvent(**data)


async def get_entry_transfers(
    client: FPLClient, entry_id: int, *, cookies: str | None = None
) -> list[Transfer]:
    data = await client.get(entry_transfers_path(entry_id), cookies=cookies)
    return [Transfer(**t) for t in data]
