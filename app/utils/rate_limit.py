"""In-process fixed-window rate limiter keyed by endpoint and client address."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from starlette.requests import Request


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one rate-limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: float

    def retry_after(self, now: float | None = None) -> int:
        """Seconds until the current window closes (at least 1)."""
        current = time.monotonic() if now is None else now
        return max(1, int(self.reset_at - current + 0.999))

    def to_headers(self) -> dict[str, str]:
        """Convert to standard rate limit headers."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(0, self.remaining)),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after())
        return headers


class FixedWindowRateLimiter:
    """Count hits per key inside a fixed window.

    Memory is per process: with several workers each one keeps its own
    counters, so this only throttles abuse and never guards correctness.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        """Record one request for ``key`` and report whether it is allowed."""
        now = self._clock()
        with self._lock:
            entry = self._windows.get(key)
            if entry is None or entry[1] <= now:
                reset_at = now + window_seconds
                self._windows[key] = (1, reset_at)
                return RateLimitResult(True, limit, limit - 1, reset_at)

            count, reset_at = entry
            if count >= limit:
                return RateLimitResult(False, limit, 0, reset_at)

            count += 1
            self._windows[key] = (count, reset_at)
            return RateLimitResult(True, limit, limit - count, reset_at)

    def purge_expired(self) -> int:
        """Drop closed windows and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, reset_at) in self._windows.items() if reset_at <= now]
            for key in expired:
                del self._windows[key]
        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


def client_address(request: Request) -> str:
    """Return the caller address, preferring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_key(request: Request, prefix: str) -> str:
    """Build the limiter key for one endpoint and caller."""
    return f"{prefix}:{client_address(request)}"


limiter = FixedWindowRateLimiter()
