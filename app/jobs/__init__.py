"""Background job modules for periodic maintenance tasks."""

from app.jobs.promo_expiry import promo_code_expiry
from app.jobs.rate_limit_cleanup import purge_rate_limit_windows

__all__ = [
    "promo_code_expiry",
    "purge_rate_limit_windows",
]
