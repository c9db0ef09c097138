"""Donation endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user, get_current_user_id, get_db_client, rate_limited
from app.schemas.donation import DonationCreate, DonationResponse
from app.services.donation_service import DonationService
from supabase import Client

router = APIRouter()


@router.post(
    "",
    response_model=DonationResponse,
    dependencies=[Depends(rate_limited("donate", "rate_limit_donate"))],
)
def donate(
    payload: DonationCreate,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Tip the author of a free note with points."""
    return DonationService(client).donate(
        donor_id=get_current_user_id(user),
        note_id=str(payload.note_id),
        points=payload.points,
        message=payload.message,
    )
