"""API router package."""

from app.routers import auth, donations, ledger, notes, store

__all__ = [
    "auth",
    "donations",
    "ledger",
    "notes",
    "store",
]
