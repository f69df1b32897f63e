"""Load .env and settings.yaml, expose all configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

log = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS


def _load_env() -> None:
    env_path = PROJECT_ROOT / ".env"
    load_dotenv(env_path)


def _load_yaml() -> dict:
    settings_path = PROJECT_ROOT / "settings.yaml"
    if settings_path.exists():
        try:
            with open(settings_path) as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError:
            log.warning("Failed to parse settings.yaml, using defaults")
            return {}
    return {}


class CacheConfig(BaseModel):
    capacity: int
    ttl_ms: int

    @field_validator("capacity", "ttl_ms")
    @classmethod
    def positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v


def _default_caches() -> dict[str, CacheConfig]:
    return {
        "bootstrap": CacheConfig(capacity=10, ttl_ms=HOUR_MS),
        "fixtures": CacheConfig(capacity=10, ttl_ms=HOUR_MS),
        "live": CacheConfig(capacity=50, ttl_ms=MINUTE_MS),
        "standings": CacheConfig(capacity=100, ttl_ms=10 * MINUTE_MS),
        "entry": CacheConfig(capacity=500, ttl_ms=MINUTE_MS),
        "element_summary": CacheConfig(capacity=200, ttl_ms=30 * MINUTE_MS),
    }


class Settings(BaseModel):
    base_url: str = "https://fantasy.premierleague.com/api"
    user_agent: str = "FPL-WebApp/1.0"

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, v: str) -> str:
        return v.strip().rstrip("/")
    request_timeout: float = 15.0
    max_retries: int = 3
    retry_base_delay: float = 1.0
    rate_limit_requests: int = 100
    rate_limit_window: float = 60.0
    sweep_interval: float = 300.0
    sweep_enabled: bool = True
    default_league_id: int | None = None
    # Per-category TTLs used by the data service (ms).
    live_ttl_ms: int = MINUTE_MS
    standings_ttl_ms: int = 10 * MINUTE_MS
    element_summary_ttl_ms: int = 30 * MINUTE_MS
    entry_ttl_ms: int = 10 * MINUTE_MS
    entry_auth_ttl_ms: int = MINUTE_MS
    entry_history_ttl_ms: int = 30 * MINUTE_MS
    entry_history_auth_ttl_ms: int = 5 * MINUTE_MS
    caches: dict[str, CacheConfig] = Field(default_factory=_default_caches)

    @field_validator("caches")
    @classmethod
    def fill_missing_caches(cls, v: dict[str, CacheConfig]) -> dict[str, CacheConfig]:
        """A partial ``caches`` block in settings.yaml keeps the other defaults."""
        merged = _default_caches()
        merged.update(v)
        return merged


def load_settings() -> Settings:
    _load_env()
    raw = _load_yaml()
    base_url = os.getenv("FPL_BASE_URL")
    if base_url:
        raw["base_url"] = base_url
    league = os.getenv("FPL_DEFAULT_LEAGUE_ID", "").strip()
    if league:
        try:
            raw["default_league_id"] = int(league)
        except ValueError:
            log.warning("Ignoring non-numeric FPL_DEFAULT_LEAGUE_ID=%r", league)
    return Settings(**raw)
