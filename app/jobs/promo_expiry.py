"""Promo code expiry job."""

from __future__ import annotations

import logging

from app.services.promo_service import PromoService
from app.utils.supabase_client import get_service_client

logger = logging.getLogger(__name__)


async def promo_code_expiry() -> None:
    """Deactivate promo codes whose expiry date has passed."""
    expired = PromoService(get_service_client()).deactivate_expired()
    for row in expired:
        logger.info("Deactivated expired promo code %s", row.get("code"))
    logger.info("promo_code_expiry completed with %s expired codes", len(expired))
