"""Shared Supabase data access helpers."""

from __future__ import annotations

import logging
import time
from typing import Any

from postgrest import APIError

from app.config import settings
from app.utils.cache import TTLCache
from app.utils.errors import AppError, InvalidInputError, NotFoundError, StoreError
from supabase import Client

logger = logging.getLogger(__name__)
_user_cache = TTLCache(settings.data_cache_max_entries)

# Profile columns that are safe to cache; balances are always read fresh.
USER_PROFILE_COLUMNS = "id,email,username"


def clear_user_cache() -> None:
    _user_cache.clear()


def error_from_api(exc: APIError, action: str = "request") -> AppError:
    """Map a PostgREST failure to the error the caller sees.

    SQLSTATE class 22 (data exception, e.g. ``22P02`` for a malformed uuid)
    means the value itself is bad and retrying cannot help.
    """
    code = str(getattr(exc, "code", None) or "")
    message = getattr(exc, "message", exc)
    if code.startswith("22"):
        logger.warning("Supabase %s rejected a value code=%s message=%s", action, code, message)
        return InvalidInputError("Malformed identifier or value in request")
    logger.error("Supabase %s failed code=%s message=%s", action, code or None, message)
    return StoreError()


class SupabaseService:
    """Thin helper wrapper around a Supabase client."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def execute(self, query, default: Any = None) -> Any:
        """Execute a Supabase query; store failures are logged and hidden."""
        started = time.perf_counter()
        try:
            response = query.execute()
        except APIError as exc:
            raise error_from_api(exc) from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        threshold_ms = settings.slow_query_log_threshold_ms
        if threshold_ms > 0 and elapsed_ms >= threshold_ms:
            logger.warning("Slow Supabase query %.1fms", elapsed_ms)
        data = response.data
        return default if data is None and default is not None else data

    def rpc(self, function: str, params: dict[str, Any]) -> dict[str, Any]:
        """Call a Postgres function and return its single result row.

        Functions return either a JSON object or a one-row table; anything
        else (including a missing ``success`` flag) is treated as a failure.
        """
        data = self.execute(self.client.rpc(function, params))
        payload = data[0] if isinstance(data, list) and data else data
        if not isinstance(payload, dict) or "success" not in payload:
            logger.error("Unexpected %s result: %r", function, data)
            raise StoreError()
        return payload

    def select_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        not_found_label: str | None = None,
    ) -> dict[str, Any]:
        """Select a single row and raise NotFoundError when missing."""
        row = self.select_optional(table, filters, columns)
        if row is None:
            raise NotFoundError(not_found_label or table)
        return row

    def select_optional(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Select a single row or return None."""
        query = self.client.table(table).select(columns)
        for key, value in filters.items():
            query = query.eq(key, value)
        rows = self.execute(query.limit(1), default=[])
        return rows[0] if rows else None

    def select_many(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select many rows from a table with optional filters and paging."""
        query = self.client.table(table).select(columns)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return self.execute(query, default=[])

    def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        """Count rows in a table with optional equality filters."""
        query = self.client.table(table).select("*", count="exact", head=True)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        try:
            response = query.execute()
        except APIError as exc:
            raise error_from_api(exc, action=f"count on {table}") from exc
        return response.count or 0

    def exists(self, table: str, filters: dict[str, Any]) -> bool:
        """Return True when at least one row matches ``filters``."""
        return self.select_optional(table, filters, columns="id") is not None

    def update(
        self,
        table: str,
        filters: dict[str, Any],
        payload: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Update rows by equality filters and return the updated rows."""
        query = self.client.table(table).update(payload)
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])

    def get_user(self, user_id: str) -> dict[str, Any]:
        """Return the cached public profile of a user."""
        cache_key = str(user_id)
        cached_user = _user_cache.get(cache_key)
        if cached_user is not None:
            return dict(cached_user)

        user = self.select_one(
            "users", {"id": user_id}, columns=USER_PROFILE_COLUMNS, not_found_label="User"
        )
        _user_cache.set(cache_key, dict(user), settings.user_cache_ttl_seconds)
        return user

    def get_points_balance(self, user_id: str) -> int:
        """Read the user's current points balance (never cached)."""
        row = self.select_one(
            "users", {"id": user_id}, columns="points_balance", not_found_label="User"
        )
        return int(row.get("points_balance") or 0)
