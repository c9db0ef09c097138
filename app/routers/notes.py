"""Note access endpoint."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_current_user_id, get_db_client
from app.schemas.note import NoteAccessResponse
from app.services.note_access_service import NoteAccessService
from supabase import Client

router = APIRouter()


@router.get("/{note_id}/access", response_model=NoteAccessResponse)
def get_note_access(
    note_id: UUID,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return whether the caller may read a note, plus a signed file URL."""
    return NoteAccessService(client).resolve(get_current_user_id(user), str(note_id))
