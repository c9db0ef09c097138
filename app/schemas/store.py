"""Store request/response schemas."""

from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class PurchaseNoteRequest(BaseModel):
    """Request body for buying one note."""

    note_id: UUID
    payment_method: Literal["points", "dollars"]


class PurchaseNoteResponse(BaseModel):
    """Result of a committed purchase."""

    success: bool = True
    payment_method: Literal["points", "dollars"]
    amount_charged: Decimal
    points_deducted: int
    new_points_balance: int
    is_exclusive: bool = False


class RedeemPromoRequest(BaseModel):
    """Request body for redeeming a promo code."""

    code: str = Field(..., min_length=1, max_length=64)


class RedeemPromoResponse(BaseModel):
    success: bool = True
    message: str
    points_received: int
    new_balance: int


class BuyPointsRequest(BaseModel):
    """Request body for buying a point pack (whole dollars)."""

    dollars: int = Field(..., gt=0)


class BuyPointsResponse(BaseModel):
    success: bool = True
    points_credited: int
    new_balance: int
