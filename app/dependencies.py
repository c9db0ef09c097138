"""FastAPI dependency injection helpers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from fastapi import Header, Request

from app.config import settings
from app.utils.cache import TTLCache
from app.utils.errors import RateLimitedError, UnauthorizedError
from app.utils.rate_limit import limiter, rate_limit_key
from app.utils.supabase_client import get_service_client, get_supabase_client
from supabase import Client

logger = logging.getLogger(__name__)
_token_cache = TTLCache(settings.auth_token_cache_max_entries)


def _bearer_token(authorization: str | None) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Missing authorization header")
    return token.strip()


def get_current_user(authorization: str = Header(None)) -> Any:
    """Resolve the Supabase user behind the request's bearer JWT.

    Validated users are cached for ``auth_token_cache_ttl_seconds`` so a
    burst of store calls does not hit the auth server each time.

    Raises:
        UnauthorizedError: 401 if the header is missing, malformed, or
            the token cannot be validated.
    """
    token = _bearer_token(authorization)
    cached_user = _token_cache.get(token)
    if cached_user is not None:
        return cached_user

    try:
        response = get_supabase_client().auth.get_user(token)
    except Exception as exc:
        raise UnauthorizedError("Invalid or expired token") from exc

    if not response or not response.user:
        raise UnauthorizedError("Invalid token")
    _token_cache.set(token, response.user, settings.auth_token_cache_ttl_seconds)
    return response.user


def get_current_user_id(user: Any) -> str:
    """Extract a stable user id string from the Supabase user object."""
    return str(user.id)


def get_current_user_email(user: Any) -> str | None:
    """Return the authenticated user's normalized email, if any."""
    raw_email = getattr(user, "email", None)
    if not isinstance(raw_email, str) or not raw_email.strip():
        return None
    return raw_email.strip().lower()


def get_db_client() -> Client:
    """Return the privileged Supabase client used by backend services."""
    return get_service_client()


def rate_limited(prefix: str, limit_setting: str) -> Callable[[Request], None]:
    """Build a dependency enforcing the ``limit_setting`` budget on an endpoint."""

    def dependency(request: Request) -> None:
        if not settings.rate_limit_enabled:
            return
        limit = int(getattr(settings, limit_setting))
        key = rate_limit_key(request, prefix)
        result = limiter.hit(key, limit, settings.rate_limit_window_seconds)
        if not result.allowed:
            logger.warning("Rate limit exceeded for %s", key)
            raise RateLimitedError(retry_after=result.retry_after(), headers=result.to_headers())

    return dependency
