"""Point tips on free notes."""

from __future__ import annotations

import logging
from typing import Any

from app.config import settings
from app.services.common import SupabaseService
from app.services.pricing import split_donation, to_decimal
from app.utils.errors import (
    InsufficientPointsError,
    InvalidInputError,
    NoteNotFreeError,
    NotFoundError,
    SelfDonationError,
    StoreError,
)
from supabase import Client

logger = logging.getLogger(__name__)


class DonationService:
    """Validate tips and run the atomic ``donate_points`` ledger function."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def donate(
        self,
        donor_id: str,
        note_id: str,
        points: int,
        message: str | None = None,
    ) -> dict[str, Any]:
        """Tip the author of a free note.

        The donor pays ``points``; the author receives the amount left after
        the platform fee. Deduction, credit, the donation record and the
        ledger rows commit together or not at all.
        """
        allowed = settings.donation_amounts_list
        if points not in allowed:
            choices = ", ".join(str(value) for value in allowed)
            raise InvalidInputError(f"Invalid donation amount. Choose one of {choices} points.")

        note = self.db.select_optional(
            "notes", {"id": note_id}, columns="id,user_id,price,is_published"
        )
        if not note or not note.get("is_published"):
            raise NotFoundError("Note")
        if to_decimal(note.get("price")) > 0:
            raise NoteNotFreeError()

        recipient_id = str(note["user_id"])
        if recipient_id == str(donor_id):
            raise SelfDonationError()

        balance = self.db.get_points_balance(donor_id)
        if balance < points:
            raise InsufficientPointsError(required=points, available=balance)

        split = split_donation(points, settings.donation_platform_fee)
        cleaned_message = (message or "").strip() or None

        payload = self.db.rpc(
            "donate_points",
            {
                "p_donor_id": donor_id,
                "p_recipient_id": recipient_id,
                "p_note_id": note_id,
                "p_points": split.points_sent,
                "p_points_received": split.points_received,
                "p_message": cleaned_message,
            },
        )
        if not payload.get("success"):
            self._raise_for_reason(str(payload.get("reason") or ""))

        logger.info(
            "Donation of %s points from %s to %s on note %s (fee=%s)",
            split.points_sent,
            donor_id,
            recipient_id,
            note_id,
            split.platform_fee,
        )
        return {
            "success": True,
            "points_donated": split.points_sent,
            "points_received": split.points_received,
            "new_balance": int(payload.get("donor_points_balance") or 0),
        }

    def received(self, user_id: str, limit: int = 50, offset: int = 0) -> list[dict[str, Any]]:
        """Return donations received by ``user_id``, newest first."""
        return self.db.select_many(
            "donations",
            filters={"recipient_id": user_id},
            columns="id,donor_id,note_id,points_amount,points_received,message,created_at",
            order_by="created_at",
            descending=True,
            limit=limit,
            offset=offset,
        )

    @staticmethod
    def _raise_for_reason(reason: str) -> None:
        if reason == "insufficient_points":
            raise InsufficientPointsError()
        if reason == "self_donation":
            raise SelfDonationError()
        if reason == "user_not_found":
            raise NotFoundError("User")
        if reason == "note_not_found":
            raise NotFoundError("Note")
        if reason == "not_free":
            raise NoteNotFreeError()
        logger.error("donate_points failed with unknown reason %r", reason)
        raise StoreError()
