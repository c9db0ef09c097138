"""Promo code redemption service."""

from __future__ import annotations

import logging
from typing import Any

from app.services.common import SupabaseService
from app.utils.errors import AppError, InvalidInputError, PromoCodeError, StoreError
from app.utils.time import now_utc
from supabase import Client

logger = logging.getLogger(__name__)

# Failure reason returned by ``redeem_promo_code`` -> API error code.
REASON_CODES = {
    "invalid_code": "INVALID_CODE",
    "inactive": "PROMO_INACTIVE",
    "expired": "PROMO_EXPIRED",
    "usage_cap_reached": "PROMO_USAGE_CAP",
    "already_redeemed": "ALREADY_REDEEMED",
}


def normalize_code(code: str) -> str:
    return code.strip().upper()


class PromoService:
    """Redeem promo codes through the atomic ``redeem_promo_code`` function."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def redeem(self, user_id: str, code: str) -> dict[str, Any]:
        """Redeem ``code`` for ``user_id``.

        Returns a structured result instead of raising on business failures:
        ``{"success", "reason", "message", "points_received"}`` plus
        ``new_balance`` when the redemption went through.
        """
        normalized = normalize_code(code)
        if not normalized:
            raise InvalidInputError("Invalid promo code")

        payload = self.db.rpc(
            "redeem_promo_code",
            {"p_code": normalized, "p_user_id": user_id},
        )
        result: dict[str, Any] = {
            "success": bool(payload.get("success")),
            "reason": payload.get("reason"),
            "message": str(payload.get("message") or ""),
            "points_received": int(payload.get("points_received") or 0),
        }
        if not result["success"]:
            logger.info("Promo code %s rejected for %s: %s", normalized, user_id, result["reason"])
            return result

        result["new_balance"] = self.db.get_points_balance(user_id)
        logger.info(
            "Promo code %s redeemed by %s for %s points",
            normalized,
            user_id,
            result["points_received"],
        )
        return result

    @staticmethod
    def error_for(result: dict[str, Any]) -> AppError:
        """Build the API error for a failed redemption result.

        Reasons the ledger function is not known to return are store faults,
        not a bad code.
        """
        reason = str(result.get("reason") or "")
        code = REASON_CODES.get(reason)
        if code is None:
            logger.error("redeem_promo_code failed with unknown reason %r", reason)
            return StoreError()
        message = result.get("message") or "Failed to redeem promo code"
        return PromoCodeError(message, code=code)

    def deactivate_expired(self) -> list[dict[str, Any]]:
        """Switch off active codes whose expiry has passed and return them."""
        return self.db.execute(
            self.db.client.table("promo_codes")
            .update({"is_active": False})
            .eq("is_active", True)
            .lt("expires_at", now_utc().isoformat()),
            default=[],
        )
