"""Note purchase business logic."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from app.config import settings
from app.services.common import SupabaseService
from app.services.pricing import (
    PAYMENT_DOLLARS,
    PurchaseQuote,
    org_domain,
    quote_purchase,
    to_decimal,
)
from app.utils.errors import (
    AlreadyPurchasedError,
    ExclusiveSoldError,
    InsufficientPointsError,
    InvalidInputError,
    NoteIsFreeError,
    NotFoundError,
    SelfPurchaseError,
    StoreError,
)
from supabase import Client

logger = logging.getLogger(__name__)

NOTE_COLUMNS = "id,user_id,title,price,is_published,is_exclusive,is_sold"


class PurchaseService:
    """Price a note and run the atomic ``purchase_note`` ledger function."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def get_listed_note(self, note_id: str) -> dict[str, Any]:
        """Return a published note or raise NotFoundError."""
        note = self.db.select_optional("notes", {"id": note_id}, columns=NOTE_COLUMNS)
        if not note or not note.get("is_published"):
            raise NotFoundError("Note")
        return note

    def org_discount_percent(self, buyer_email: str | None, author_id: str) -> Decimal:
        """Return the org member discount when buyer and author share an org."""
        buyer_domain = org_domain(buyer_email)
        if not buyer_domain:
            return Decimal(0)

        author = self.db.get_user(author_id)
        if org_domain(author.get("email")) != buyer_domain:
            return Decimal(0)

        org = self.db.select_optional(
            "organizations", {"domain": buyer_domain}, columns="discount_percent"
        )
        if not org:
            return Decimal(0)
        percent = to_decimal(org.get("discount_percent"))
        return percent if Decimal(0) < percent <= Decimal(100) else Decimal(0)

    def quote(
        self,
        note: dict[str, Any],
        buyer_id: str,
        buyer_email: str | None,
        payment_method: str,
    ) -> PurchaseQuote:
        """Validate a purchase attempt against the listing and price it."""
        price = to_decimal(note.get("price"))
        if price <= 0:
            raise NoteIsFreeError()
        if str(note["user_id"]) == str(buyer_id):
            raise SelfPurchaseError()
        if note.get("is_exclusive") and note.get("is_sold"):
            raise ExclusiveSoldError()

        discount = self.org_discount_percent(buyer_email, str(note["user_id"]))
        try:
            return quote_purchase(
                price,
                payment_method,
                points_per_dollar=settings.points_per_dollar,
                points_discount=settings.points_discount,
                org_discount_percent=discount,
            )
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc

    def purchase(
        self,
        buyer_id: str,
        buyer_email: str | None,
        note_id: str,
        payment_method: str,
    ) -> dict[str, Any]:
        """Buy one note with points or (mock) dollars."""
        note = self.get_listed_note(note_id)
        quote = self.quote(note, buyer_id, buyer_email, payment_method)

        if quote.payment_method == PAYMENT_DOLLARS:
            self._charge_card(buyer_id, quote.amount_charged)

        payload = self.db.rpc(
            "purchase_note",
            {
                "p_buyer_id": buyer_id,
                "p_note_id": note_id,
                "p_payment_method": quote.payment_method,
                "p_dollar_price": str(quote.dollar_price),
                "p_amount_charged": str(quote.amount_charged),
                "p_points_cost": quote.points_cost,
            },
        )
        if not payload.get("success"):
            self._raise_for_reason(str(payload.get("reason") or ""))

        logger.info(
            "Note %s bought by %s via %s (charged=%s points=%s)",
            note_id,
            buyer_id,
            quote.payment_method,
            quote.amount_charged,
            quote.points_cost,
        )
        return {
            "success": True,
            "payment_method": payload.get("payment_method", quote.payment_method),
            "amount_charged": to_decimal(payload.get("amount_charged", quote.amount_charged)),
            "points_deducted": int(payload.get("points_deducted", quote.points_cost)),
            "new_points_balance": int(payload.get("buyer_points_balance") or 0),
            "is_exclusive": bool(payload.get("is_exclusive")),
        }

    @staticmethod
    def _charge_card(buyer_id: str, amount: Decimal) -> None:
        # Mock dollar payment: no processor is wired in, charges always succeed.
        logger.info("Mock card charge of %s for buyer %s", amount, buyer_id)

    @staticmethod
    def _raise_for_reason(reason: str) -> None:
        if reason == "note_not_found":
            raise NotFoundError("Note")
        if reason == "already_purchased":
            raise AlreadyPurchasedError()
        if reason == "exclusive_sold":
            raise ExclusiveSoldError()
        if reason == "insufficient_points":
            raise InsufficientPointsError()
        logger.error("purchase_note failed with unknown reason %r", reason)
        raise StoreError()
