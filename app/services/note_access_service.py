"""Decide who may read a note and hand out signed file URLs."""

from __future__ import annotations

import logging
from typing import Any

from app.config import settings
from app.services.common import SupabaseService
from app.services.ledger_service import LedgerService
from app.services.pricing import to_decimal
from app.utils.errors import NotFoundError
from app.utils.supabase_client import note_files_bucket
from supabase import Client

logger = logging.getLogger(__name__)


class NoteAccessService:
    """Grant access to free notes, to authors, and to buyers."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)
        self.ledger = LedgerService(client)

    def resolve(self, viewer_id: str, note_id: str) -> dict[str, Any]:
        """Return the viewer's access to a note and, if granted, a file URL."""
        note = self.db.select_optional(
            "notes",
            {"id": note_id},
            columns="id,user_id,price,is_published,is_exclusive,is_sold,original_file_path",
        )
        is_author = bool(note) and str(note["user_id"]) == str(viewer_id)
        if not note or (not note.get("is_published") and not is_author):
            raise NotFoundError("Note")

        price = to_decimal(note.get("price"))
        has_purchased = False
        if price > 0 and not is_author:
            has_purchased = self.ledger.has_purchased(viewer_id, note_id)

        can_view = price == 0 or is_author or has_purchased
        file_url = None
        if can_view and note.get("original_file_path"):
            file_url = self.signed_file_url(str(note["original_file_path"]))

        return {
            "note_id": note_id,
            "can_view": can_view,
            "is_author": is_author,
            "has_purchased": has_purchased,
            "is_exclusive": bool(note.get("is_exclusive")),
            "is_sold": bool(note.get("is_sold")),
            "file_url": file_url,
        }

    def signed_file_url(self, path: str) -> str | None:
        """Return a short-lived signed URL for a stored note file."""
        bucket = note_files_bucket(self.db.client)
        try:
            signed = bucket.create_signed_url(path, settings.signed_url_ttl_seconds)
        except Exception:
            logger.exception("Failed to sign storage path %s", path)
            return None
        return signed.get("signedURL") or signed.get("signedUrl")
