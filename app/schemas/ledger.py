"""Ledger schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class TransactionResponse(BaseModel):
    """A single ledger row."""

    id: str
    user_id: str
    type: str
    amount: Decimal = Decimal(0)
    points_amount: int = 0
    note_id: str | None = None
    created_at: datetime


class TransactionPage(BaseModel):
    transactions: list[TransactionResponse]
    total: int


class BalanceResponse(BaseModel):
    """Current balances of the caller."""

    points_balance: int = 0
    dollar_balance: Decimal = Decimal(0)


class PurchaseResponse(BaseModel):
    id: str
    buyer_id: str
    note_id: str
    price_paid: Decimal
    payment_method: str
    created_at: datetime
