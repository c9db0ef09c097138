"""Price, discount and fee arithmetic for the points economy.

All money values are ``Decimal``; points are whole integers. Rounding always
favours the platform: point costs round up, donation payouts round down.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Any

CENT = Decimal("0.01")
HUNDRED = Decimal(100)
MAX_NOTE_PRICE = Decimal("999.99")

# Mail providers whose users do not share an organisation.
PUBLIC_EMAIL_DOMAINS = frozenset(
    {
        "gmail.com",
        "googlemail.com",
        "outlook.com",
        "hotmail.com",
        "live.com",
        "yahoo.com",
        "icloud.com",
        "me.com",
        "aol.com",
        "proton.me",
        "protonmail.com",
        "gmx.com",
        "mail.com",
    }
)

PAYMENT_POINTS = "points"
PAYMENT_DOLLARS = "dollars"


@dataclass(frozen=True)
class PurchaseQuote:
    """What a buyer pays for one note."""

    payment_method: str
    dollar_price: Decimal
    amount_charged: Decimal
    points_cost: int


@dataclass(frozen=True)
class DonationSplit:
    points_sent: int
    points_received: int
    platform_fee: int


def to_decimal(value: Any) -> Decimal:
    """Convert a PostgREST numeric (number or string) to ``Decimal``."""
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal(0)
    return Decimal(str(value))


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def org_domain(email: str | None) -> str | None:
    """Return the organisation domain of an email, or None for public mail."""
    if not email or "@" not in email:
        return None
    domain = email.rsplit("@", 1)[1].strip().lower()
    if not domain or domain in PUBLIC_EMAIL_DOMAINS:
        return None
    return domain


def quote_purchase(
    price: Decimal,
    payment_method: str,
    points_per_dollar: int,
    points_discount: Decimal,
    org_discount_percent: Decimal = Decimal(0),
) -> PurchaseQuote:
    """Price a note for the chosen payment method.

    ``dollar_price`` stays the undiscounted list price: the seller is always
    credited in full and discounts are absorbed by the platform.
    """
    if price <= 0 or price > MAX_NOTE_PRICE:
        raise ValueError(f"Note price out of range: {price}")
    if payment_method not in (PAYMENT_POINTS, PAYMENT_DOLLARS):
        raise ValueError(f"Unknown payment method: {payment_method}")

    effective = price
    if org_discount_percent > 0:
        effective = price * (1 - org_discount_percent / HUNDRED)

    if payment_method == PAYMENT_POINTS:
        discounted = effective * (1 - points_discount)
        points_cost = int((discounted * points_per_dollar).to_integral_value(rounding=ROUND_CEILING))
        return PurchaseQuote(
            payment_method=payment_method,
            dollar_price=quantize_money(price),
            amount_charged=quantize_money(discounted),
            points_cost=points_cost,
        )

    return PurchaseQuote(
        payment_method=payment_method,
        dollar_price=quantize_money(price),
        amount_charged=quantize_money(effective),
        points_cost=0,
    )


def split_donation(points: int, platform_fee: Decimal) -> DonationSplit:
    """Split a tip into the author's share and the platform fee."""
    if points <= 0:
        raise ValueError("Donation must be positive")
    received = int((Decimal(points) * (1 - platform_fee)).to_integral_value(rounding=ROUND_FLOOR))
    return DonationSplit(
        points_sent=points,
        points_received=received,
        platform_fee=points - received,
    )


def points_for_dollars(dollars: int, points_per_dollar: int) -> int:
    return dollars * points_per_dollar
