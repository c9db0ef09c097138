"""Donation schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class DonationCreate(BaseModel):
    """Request body for tipping the author of a free note."""

    note_id: UUID
    points: int = Field(..., gt=0)
    message: str | None = Field(default=None, max_length=500)


class DonationResponse(BaseModel):
    success: bool = True
    points_donated: int
    points_received: int
    new_balance: int


class DonationReceived(BaseModel):
    """A tip received by the current user."""

    id: str
    donor_id: str
    note_id: str
    points_amount: int
    points_received: int
    message: str | None = None
    created_at: datetime
