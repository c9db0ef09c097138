"""Authentication endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_current_user_id, get_db_client
from app.services.common import SupabaseService
from supabase import Client

router = APIRouter()


@router.get("/session")
def auth_session(
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return the authenticated user's marketplace profile."""
    profile = SupabaseService(client).get_user(get_current_user_id(user))
    return {"user": profile}
