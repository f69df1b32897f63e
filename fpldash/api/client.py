"""Async httpx wrapper with retries and request-rate limiting."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from fpldash.services.rate_limit import RateLimiter

log = logging.getLogger(__name__)

BASE_URL = "https://fantasy.premierleague.com/api"
USER_AGENT = "FPL-WebApp/1.0"


class FPLAPIError(Exception):
    """Upstream request failed after retries."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceeded(FPLAPIError):
    """Local request budget for the current window is used up."""


class FPLClient:
    """Async HTTP client for the public FPL API."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        user_agent: str = USER_AGENT,
        timeout: float = 15.0,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        kwargs: dict[str, Any] = {
            "base_url": base_url,
            "timeout": timeout,
            "headers": {"User-Agent": user_agent, "Accept": "application/json"},
        }
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**kwargs)
        self.max_retries = max(1, max_retries)
        self.retry_base_delay = retry_base_delay
        self.rate_limiter = rate_limiter or RateLimiter()

    async def close(self) -> None:
        await self._client.aclose()

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        cookies: str | None = None,
    ) -> Any:
        """GET *path* and return decoded JSON.

        Client errors (4xx) fail immediately. Server errors and transport
        failures are retried with exponential backoff.
        """
        if not self.rate_limiter.check():
            raise RateLimitExceeded(f"Request limit reached, resets at {self.rate_limiter.reset_at:.0f}")

        headers = {"Cookie": cookies} if cookies else None
        for attempt in range(self.max_retries):
            last = attempt == self.max_retries - 1
            try:
                response = await self._client.get(path, params=params, headers=headers)
            except httpx.TransportError as exc:
                if last:
                    raise FPLAPIError(f"Request to {path} failed: {exc}") from exc
                log.warning("Transport error on %s (attempt %d): %s", path, attempt + 1, exc)
            else:
                if response.is_success:
                    return response.json()
                message = f"HTTP {response.status_code}: {response.reason_phrase}"
                if response.is_client_error or last:
                    raise FPLAPIError(message, status_code=response.status_code)
                log.warning("%s on %s (attempt %d), retrying", message, path, attempt + 1)
            await asyncio.sleep(self.retry_base_delay * 2**attempt)
        raise AssertionError("unreachable")
