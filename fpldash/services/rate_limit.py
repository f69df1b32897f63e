"""Fixed-window request limiter for outbound FPL API calls."""

from __future__ import annotations

import time


class RateLimiter:
    """Allows at most ``max_requests`` per ``window`` seconds."""

    def __init__(self, max_requests: int = 100, window: float = 60.0) -> None:
        self.max_requests = max_requests
        self.window = window
        self.count = 0
        self.reset_at = time.time() + window

    def _roll(self) -> None:
        now = time.time()
        if now > self.reset_at:
            self.count = 0
            self.reset_at = now + self.window

    def check(self) -> bool:
        """Consume one request slot. False when the window is exhausted."""
        self._roll()
        if self.count >= self.max_requests:
            return False
        self.count += 1
        return True

    @property
    def remaining(self) -> int:
        self._roll()
        return max(0, self.max_requests - self.count)

    @property
    def is_exhausted(self) -> bool:
        return self.remaining == 0

    def status(self) -> dict[str, float]:
        remaining = self.remaining
        return {"remaining": remaining, "reset_at": self.reset_at}

    @property
    def status_text(self) -> str:
        return f"Requests: {self.remaining}/{self.max_requests}"
