"""Generate random promo codes and insert them into Supabase."""

from __future__ import annotations

import argparse
import secrets
import string
import sys
from collections.abc import Sequence
from datetime import timedelta
from pathlib import Path
from typing import Any

from postgrest import APIError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

ALPHABET = string.ascii_uppercase + string.digits


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Create random promo codes in public.promo_codes.",
    )
    parser.add_argument(
        "count",
        type=int,
        help="How many promo codes to generate.",
    )
    parser.add_argument(
        "--points",
        type=int,
        required=True,
        help="Points granted by each code.",
    )
    parser.add_argument(
        "--length",
        type=int,
        default=8,
        help="Code length (default: 8).",
    )
    parser.add_argument(
        "--prefix",
        type=str,
        default="",
        help="Fixed prefix, e.g. LAUNCH.",
    )
    parser.add_argument(
        "--expires-in-days",
        type=int,
        default=None,
        help="Days until the codes expire (default: never).",
    )
    parser.add_argument(
        "--max-uses",
        type=int,
        default=None,
        help="Total redemptions allowed per code (default: unlimited).",
    )
    return parser.parse_args(argv)


def random_code(length: int, prefix: str = "") -> str:
    """Return an uppercase alphanumeric code."""
    return prefix.upper() + "".join(secrets.choice(ALPHABET) for _ in range(length))


def is_unique_violation(exc: APIError) -> bool:
    """Return True when an insert failed due to duplicate code."""
    message = str(getattr(exc, "message", "")).lower()
    code = str(getattr(exc, "code", "")).lower()
    return "duplicate key value" in message or code == "23505"


def build_row(
    code: str,
    points: int,
    expires_in_days: int | None,
    max_uses: int | None,
) -> dict[str, Any]:
    """Return the promo_codes row for one generated code."""
    from app.utils.time import now_utc

    expires_at = None
    if expires_in_days is not None:
        expires_at = (now_utc() + timedelta(days=expires_in_days)).isoformat()
    return {
        "code": code,
        "points_amount": points,
        "expires_at": expires_at,
        "max_uses": max_uses,
    }


def create_codes(
    count: int,
    points: int,
    length: int = 8,
    prefix: str = "",
    expires_in_days: int | None = None,
    max_uses: int | None = None,
) -> list[str]:
    """Insert ``count`` unique promo codes and return them."""
    if count <= 0:
        raise ValueError("count must be >= 1")
    if points <= 0:
        raise ValueError("points must be >= 1")
    if length < 4:
        raise ValueError("length must be >= 4")
    if max_uses is not None and max_uses <= 0:
        raise ValueError("max-uses must be >= 1")

    from app.utils.supabase_client import get_service_client

    client = get_service_client()
    generated: list[str] = []

    for _ in range(count):
        created = False
        for _attempt in range(100):
            code = random_code(length, prefix)
            try:
                client.table("promo_codes").insert(
                    build_row(code, points, expires_in_days, max_uses)
                ).execute()
                generated.append(code)
                created = True
                break
            except APIError as exc:
                if is_unique_violation(exc):
                    continue
                raise

        if not created:
            raise RuntimeError("Failed to generate a unique promo code after 100 attempts")

    return generated


def print_codes(codes: Sequence[str], points: int) -> None:
    """Print generated codes in copy-friendly form."""
    print(f"Generated {len(codes)} promo code(s) worth {points} points:")
    for code in codes:
        print(code)


def main() -> None:
    """CLI entry point."""
    args = parse_args()
    codes = create_codes(
        count=args.count,
        points=args.points,
        length=args.length,
        prefix=args.prefix,
        expires_in_days=args.expires_in_days,
        max_uses=args.max_uses,
    )
    print_codes(codes, args.points)


if __name__ == "__main__":
    main()
