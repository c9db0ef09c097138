"""Small bounded TTL cache shared by auth and profile lookups."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any


class TTLCache:
    """Thread-safe dict cache with per-entry expiry and FIFO eviction."""

    def __init__(
        self,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._entries: dict[Any, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Any) -> Any | None:
        """Return a value when present and not expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if not entry:
                return None
            expires_at, value = entry
            if expires_at <= now:
                self._entries.pop(key, None)
                return None
            return value

    def set(self, key: Any, value: Any, ttl_seconds: int) -> None:
        """Store a value for ``ttl_seconds``; a non-positive TTL disables caching."""
        if ttl_seconds <= 0:
            return

        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                oldest_key = next(iter(self._entries))
                self._entries.pop(oldest_key, None)
            self._entries[key] = (self._clock() + ttl_seconds, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
