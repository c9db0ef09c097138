"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import settings
from app.jobs.promo_expiry import promo_code_expiry
from app.jobs.rate_limit_cleanup import purge_rate_limit_windows

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def register_jobs() -> None:
    """Register all periodic jobs if not already present."""
    if scheduler.get_job("rate_limit_cleanup") is None:
        scheduler.add_job(
            purge_rate_limit_windows,
            CronTrigger(minute="*", timezone=settings.timezone),
            id="rate_limit_cleanup",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    if scheduler.get_job("promo_code_expiry") is None:
        scheduler.add_job(
            promo_code_expiry,
            CronTrigger(minute=5, timezone=settings.timezone),
            id="promo_code_expiry",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
