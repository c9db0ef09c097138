"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "DonationService": "app.services.donation_service",
    "LedgerService": "app.services.ledger_service",
    "NoteAccessService": "app.services.note_access_service",
    "PointsService": "app.services.points_service",
    "PromoService": "app.services.promo_service",
    "PurchaseService": "app.services.purchase_service",
    "SupabaseService": "app.services.common",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
