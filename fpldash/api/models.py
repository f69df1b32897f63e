"""Pydantic models for FPL API responses.

Only the fields the dashboard reads are declared; everything else the API
sends is kept as extra data.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FPLModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class Gameweek(FPLModel):
    id: int
    name: str = ""
    deadline_time: datetime | None = None
    is_current: bool = False
    is_next: bool = False
    is_previous: bool = False
    finished: bool = False
    data_checked: bool = False
    highest_score: int | None = None
    most_captained: int | None = None


class Team(FPLModel):
    id: int
    name: str
    short_name: str = ""
    strength: int | None = None


class Player(FPLModel):
    id: int
    web_name: str
    team: int
    element_type: int
    now_cost: int = 0
    total_points: int = 0
    selected_by_percent: str = "0.0"
    status: str = "a"


class PositionType(FPLModel):
    id: int
    singular_name_short: str = ""


class Bootstrap(FPLModel):
    events: list[Gameweek] = Field(default_factory=list)
    teams: list[Team] = Field(default_factory=list)
    elements: list[Player] = Field(default_factory=list)
    element_types: list[PositionType] = Field(default_factory=list)
    total_players: int = 0

    def current_event(self) -> Gameweek | None:
        return next((e for e in self.events if e.is_current), None)

    def next_event(self) -> Gameweek | None:
        return next((e for e in self.events if e.is_next), None)

    def event(self, gw: int) -> Gameweek | None:
        return next((e for e in self.events if e.id == gw), None)


class Fixture(FPLModel):
    id: int
    event: int | None = None
    team_h: int
    team_a: int
    team_h_score: int | None = None
    team_a_score: int | None = None
    team_h_difficulty: int | None = None
    team_a_difficulty: int | None = None
    kickoff_time: datetime | None = None
    finished: bool = False


class LiveStats(FPLModel):
    minutes: int = 0
    total_points: int = 0
    bonus: int = 0


class LiveElement(FPLModel):
    id: int
    stats: LiveStats = Field(default_factory=LiveStats)


class LiveGw(FPLModel):
    elements: list[LiveElement] = Field(default_factory=list)


class StandingRow(FPLModel):
    entry: int
    entry_name: str = ""
    player_name: str = ""
    rank: int = 0
    last_rank: int = 0
    total: int = 0
    event_total: int = 0


class StandingsPage(FPLModel):
    has_next: bool = False
    page: int = 1
    results: list[StandingRow] = Field(default_factory=list)


class LeagueInfo(FPLModel):
    id: int
    name: str = ""


class LeagueStandings(FPLModel):
    league: LeagueInfo
    standings: StandingsPage = Field(default_factory=StandingsPage)

    def entry_ids(self) -> list[int]:
        return [r.entry for r in self.standings.results]


class Entry(FPLModel):
    id: int
    name: str = ""
    player_first_name: str = ""
    player_last_name: str = ""
    summary_overall_points: int | None = None
    summary_overall_rank: int | None = None
    current_event: int | None = None


class ChipPlay(FPLModel):
    name: str
    event: int


class EntryHistory(FPLModel):
    current: list[dict] = Field(default_factory=list)
    past: list[dict] = Field(default_factory=list)
    chips: list[ChipPlay] = Field(default_factory=list)


class Pick(FPLModel):
    element: int
    position: int
    multiplier: int = 1
    is_captain: bool = False
    is_vice_captain: bool = False


class EntryEvent(FPLModel):
    active_chip: str | None = None
    picks: list[Pick] = Field(default_factory=list)
    entry_history: dict = Field(default_factory=dict)

    def captain(self) -> Pick | None:
        return next((p for p in self.picks if p.is_captain), None)


class Transfer(FPLModel):
    element_in: int
    element_out: int
    event: int
    element_in_cost: int = 0
    element_out_cost: int = 0
    time: datetime | None = None


class ElementSummary(FPLModel):
    fixtures: list[dict] = Field(default_factory=list)
    history: list[dict] = Field(default_factory=list)
    history_past: list[dict] = Field(default_factory=list)
