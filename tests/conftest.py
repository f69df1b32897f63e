"""Shared test fixtures."""

from __future__ import annotations

import pytest

from fpldash.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(sweep_enabled=False, retry_base_delay=0)


@pytest.fixture
def bootstrap_data() -> dict:
    """Trimmed bootstrap-static payload: three gameweeks, two teams."""
    return {
        "events": [
            _make_event(1, finished=True),
            _make_event(2, is_current=True),
            _make_event(3, is_next=True),
        ],
        "teams": [
            {"id": 1, "name": "Liverpool", "short_name": "LIV"},
            {"id": 2, "name": "Tottenham", "short_name": "TOT"},
        ],
        "elements": [
            {"id": 1, "web_name": "Salah", "team": 1, "element_type": 3, "now_cost": 130},
            {"id": 2, "web_name": "Son", "team": 2, "element_type": 3, "now_cost": 100},
            {"id": 3, "web_name": "Alisson", "team": 1, "element_type": 1, "now_cost": 55},
        ],
        "element_types": [
            {"id": 1, "singular_name_short": "GKP"},
            {"id": 3, "singular_name_short": "MID"},
        ],
        "total_players": 1000000,
    }


@pytest.fixture
def standings_data() -> dict:
    return {
        "league": {"id": 314, "name": "Overall"},
        "standings": {
            "has_next": False,
            "page": 1,
            "results": [
                {"entry": 11, "entry_name": "Team A", "player_name": "A", "rank": 1, "total": 120},
                {"entry": 22, "entry_name": "Team B", "player_name": "B", "rank": 2, "total": 110},
            ],
        },
    }


def _make_event(gw: int, *, is_current: bool = False, is_next: bool = False, finished: bool = False) -> dict:
    return {
        "id": gw,
        "name": f"Gameweek {gw}",
        "deadline_time": f"2026-08-{10 + gw * 7:02d}T17:30:00Z",
        "is_current": is_current,
        "is_next": is_next,
        "finished": finished,
        "data_checked": finished,
        "chip_plays": [],
    }
