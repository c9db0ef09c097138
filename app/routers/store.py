"""Store endpoints: note purchases, promo codes and point packs."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import (
    get_current_user,
    get_current_user_email,
    get_current_user_id,
    get_db_client,
    rate_limited,
)
from app.schemas.store import (
    BuyPointsRequest,
    BuyPointsResponse,
    PurchaseNoteRequest,
    PurchaseNoteResponse,
    RedeemPromoRequest,
    RedeemPromoResponse,
)
from app.services.points_service import PointsService
from app.services.promo_service import PromoService
from app.services.purchase_service import PurchaseService
from supabase import Client

router = APIRouter()


@router.post(
    "/purchase-note",
    response_model=PurchaseNoteResponse,
    dependencies=[Depends(rate_limited("purchase-note", "rate_limit_purchase"))],
)
def purchase_note(
    payload: PurchaseNoteRequest,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Buy a note with points or dollars."""
    service = PurchaseService(client)
    return service.purchase(
        buyer_id=get_current_user_id(user),
        buyer_email=get_current_user_email(user),
        note_id=str(payload.note_id),
        payment_method=payload.payment_method,
    )


@router.post(
    "/redeem-promo",
    response_model=RedeemPromoResponse,
    dependencies=[Depends(rate_limited("redeem-promo", "rate_limit_redeem_promo"))],
)
def redeem_promo(
    payload: RedeemPromoRequest,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Redeem a promo code for points."""
    result = PromoService(client).redeem(user_id=get_current_user_id(user), code=payload.code)
    if not result["success"]:
        raise PromoService.error_for(result)
    return result


@router.post(
    "/buy-points",
    response_model=BuyPointsResponse,
    dependencies=[Depends(rate_limited("buy-points", "rate_limit_buy_points"))],
)
def buy_points(
    payload: BuyPointsRequest,
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Buy a point pack."""
    return PointsService(client).buy_points(
        user_id=get_current_user_id(user),
        dollars=payload.dollars,
    )
