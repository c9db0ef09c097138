"""Ledger endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_current_user, get_current_user_id, get_db_client
from app.schemas.donation import DonationReceived
from app.schemas.ledger import BalanceResponse, PurchaseResponse, TransactionPage
from app.services.donation_service import DonationService
from app.services.ledger_service import TRANSACTION_TYPES, LedgerService
from app.utils.errors import InvalidInputError
from supabase import Client

router = APIRouter()


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return current user's points and dollar balances."""
    return LedgerService(client).balances(get_current_user_id(user))


@router.get("/transactions", response_model=TransactionPage)
def list_transactions(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    transaction_type: str | None = Query(default=None, alias="type"),
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return current user's ledger rows, newest first."""
    if transaction_type is not None and transaction_type not in TRANSACTION_TYPES:
        raise InvalidInputError(f"Unknown transaction type '{transaction_type}'")

    rows, total = LedgerService(client).list_transactions(
        user_id=get_current_user_id(user),
        limit=limit,
        offset=offset,
        transaction_type=transaction_type,
    )
    return {"transactions": rows, "total": total}


@router.get("/purchases", response_model=list[PurchaseResponse])
def list_purchases(
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> list[dict]:
    """Return notes bought by the current user."""
    return LedgerService(client).list_purchases(get_current_user_id(user))


@router.get("/donations", response_model=list[DonationReceived])
def list_donations_received(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    user: Any = Depends(get_current_user),
    client: Client = Depends(get_db_client),
) -> list[dict]:
    """Return tips received by the current user."""
    return DonationService(client).received(
        get_current_user_id(user), limit=limit, offset=offset
    )
