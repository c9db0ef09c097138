"""Rate-limit window cleanup job."""

from __future__ import annotations

import logging

from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)


async def purge_rate_limit_windows() -> None:
    """Drop closed rate-limit windows so the in-memory store stays bounded."""
    removed = limiter.purge_expired()
    if removed:
        logger.info("purge_rate_limit_windows removed %s windows", removed)
