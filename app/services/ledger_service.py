"""Read side of the points ledger."""

from __future__ import annotations

from typing import Any

from app.services.common import SupabaseService
from app.services.pricing import to_decimal
from supabase import Client

TRANSACTION_TYPES = (
    "points_purchase",
    "note_bought_points",
    "note_bought_dollars",
    "note_sale",
    "promo_code_redemption",
    "donation_sent",
    "donation_fee",
    "donation_received",
)


class LedgerService:
    """Query balances, transactions and purchases.

    Ledger rows are append-only and only ever written by the database
    functions; nothing here mutates them.
    """

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def balances(self, user_id: str) -> dict[str, Any]:
        """Return the user's points and dollar balances."""
        row = self.db.select_one(
            "users",
            {"id": user_id},
            columns="points_balance,dollar_balance",
            not_found_label="User",
        )
        return {
            "points_balance": int(row.get("points_balance") or 0),
            "dollar_balance": to_decimal(row.get("dollar_balance")),
        }

    def list_transactions(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
        transaction_type: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return ledger rows with total count for pagination."""
        filters: dict[str, Any] = {"user_id": user_id}
        if transaction_type:
            filters["type"] = transaction_type
        rows = self.db.select_many(
            "transactions",
            filters=filters,
            order_by="created_at",
            descending=True,
            limit=limit,
            offset=offset,
        )
        total = self.db.count("transactions", filters)
        return rows, total

    def list_purchases(self, buyer_id: str) -> list[dict[str, Any]]:
        return self.db.select_many(
            "purchases",
            filters={"buyer_id": buyer_id},
            order_by="created_at",
            descending=True,
        )

    def has_purchased(self, buyer_id: str, note_id: str) -> bool:
        return self.db.exists("purchases", {"buyer_id": buyer_id, "note_id": note_id})
