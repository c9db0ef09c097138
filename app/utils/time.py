"""Time utility helpers."""

from __future__ import annotations

from datetime import UTC, datetime


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)
