"""Point pack purchases."""

from __future__ import annotations

import logging
from typing import Any

from app.config import settings
from app.services.common import SupabaseService
from app.services.pricing import points_for_dollars
from app.utils.errors import InvalidInputError, NotFoundError, StoreError
from supabase import Client

logger = logging.getLogger(__name__)


class PointsService:
    """Sell point packs for (mock) dollars."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def buy_points(self, user_id: str, dollars: int) -> dict[str, Any]:
        """Credit ``dollars`` worth of points and record a ``points_purchase``."""
        packages = settings.point_packages_list
        if dollars not in packages:
            choices = ", ".join(f"${value}" for value in packages)
            raise InvalidInputError(f"Choose a point pack: {choices}")

        points = points_for_dollars(dollars, settings.points_per_dollar)
        # Mock dollar payment, same as note purchases.
        logger.info("Mock card charge of $%s for %s points (user %s)", dollars, points, user_id)

        payload = self.db.rpc(
            "buy_points",
            {"p_user_id": user_id, "p_amount": dollars, "p_points": points},
        )
        if not payload.get("success"):
            if payload.get("reason") == "user_not_found":
                raise NotFoundError("User")
            logger.error("buy_points failed with reason %r", payload.get("reason"))
            raise StoreError()

        return {
            "success": True,
            "points_credited": int(payload.get("points_credited") or points),
            "new_balance": int(payload.get("new_balance") or 0),
        }
