"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Iterator
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient
from postgrest import APIError


def _set_default_env() -> None:
    os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
    os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
    os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")
    os.environ.setdefault("ENABLE_SCHEDULER", "false")


_set_default_env()


class FakeResponse:
    def __init__(self, data: Any, count: int | None = None) -> None:
        self.data = data
        self.count = count


class FakeQuery:
    """Records one PostgREST builder chain and runs it against in-memory rows."""

    def __init__(self, db: FakeSupabase, table: str) -> None:
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.filters: list[tuple[str, str, Any]] = []
        self.order_key: str | None = None
        self.descending = False
        self.limit_n: int | None = None
        self.offset_n = 0

    def select(self, _columns: str = "*", count: str | None = None, head: bool = False):
        self.op = "select"
        return self

    def insert(self, payload: Any):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict[str, Any]):
        self.op = "update"
        self.payload = payload
        return self

    def eq(self, key: str, value: Any):
        self.filters.append(("eq", key, value))
        return self

    def lt(self, key: str, value: Any):
        self.filters.append(("lt", key, value))
        return self

    def order(self, key: str, desc: bool = False):
        self.order_key = key
        self.descending = desc
        return self

    def limit(self, value: int):
        self.limit_n = value
        return self

    def offset(self, value: int):
        self.offset_n = value
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        for op, key, value in self.filters:
            current = row.get(key)
            if op == "eq" and current != value:
                return False
            if op == "lt" and (current is None or not current < value):
                return False
        return True

    def execute(self) -> FakeResponse:
        self.db.queries.append(self)
        failure = self.db.fail_tables.get(self.table)
        if failure:
            # True simulates a dropped connection; a string is the SQLSTATE to report.
            code = failure if isinstance(failure, str) else "08006"
            raise APIError({"message": f"request failed ({code})", "code": code})

        rows = self.db.tables.setdefault(self.table, [])
        if self.op == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            rows.extend(dict(item) for item in payloads)
            return FakeResponse([dict(item) for item in payloads])

        matched = [row for row in rows if self._matches(row)]
        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.order_key:
            matched.sort(key=lambda row: str(row.get(self.order_key)), reverse=self.descending)
        total = len(matched)
        matched = matched[self.offset_n :]
        if self.limit_n is not None:
            matched = matched[: self.limit_n]
        return FakeResponse([dict(row) for row in matched], count=total)


class FakeRpc:
    def __init__(self, db: FakeSupabase, name: str, params: dict[str, Any]) -> None:
        self.db = db
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        self.db.rpc_calls.append((self.name, self.params))
        result = self.db.rpc_results.get(self.name)
        if isinstance(result, Exception):
            raise result
        if callable(result):
            result = result(self.params)
        return FakeResponse(result)


class FakeBucket:
    def __init__(self, db: FakeSupabase, name: str) -> None:
        self.db = db
        self.name = name

    def create_signed_url(self, path: str, expires_in: int) -> dict[str, str]:
        self.db.signed.append((self.name, path, expires_in))
        return {"signedURL": f"https://storage.test/{self.name}/{path}?ttl={expires_in}"}


class FakeSupabase:
    """Stand-in for ``supabase.Client`` covering the calls the services make."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.rpc_results: dict[str, Any] = {}
        self.rpc_calls: list[tuple[str, dict[str, Any]]] = []
        self.queries: list[FakeQuery] = []
        self.signed: list[tuple[str, str, int]] = []
        self.fail_tables: dict[str, bool | str] = {}
        self.storage = SimpleNamespace(from_=lambda name: FakeBucket(self, name))

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict[str, Any]) -> FakeRpc:
        return FakeRpc(self, name, params)

    def seed(self, table: str, *rows: dict[str, Any]) -> None:
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)


@pytest.fixture
def fake_db() -> FakeSupabase:
    """Return an empty in-memory Supabase stand-in."""
    return FakeSupabase()


@pytest.fixture(autouse=True)
def _reset_shared_state() -> Iterator[None]:
    from app.services.common import clear_user_cache
    from app.utils.rate_limit import limiter

    clear_user_cache()
    limiter.reset()
    yield
    clear_user_cache()
    limiter.reset()


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a FastAPI test client."""
    from app.main import app

    return TestClient(app)


@pytest.fixture
def login(
    client: TestClient,
    fake_db: FakeSupabase,
) -> Iterator[Callable[..., SimpleNamespace]]:
    """Authenticate requests as a given user against ``fake_db``."""
    from app.dependencies import get_current_user, get_db_client
    from app.main import app

    def _login(user_id: str = "buyer-1", email: str | None = "reader@gmail.com") -> SimpleNamespace:
        user = SimpleNamespace(id=user_id, email=email)
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    app.dependency_overrides[get_db_client] = lambda: fake_db
    yield _login
    app.dependency_overrides.clear()


ROOT = Path(__file__).resolve().parents[1]
BASE_SCHEMA = ROOT / "tests" / "sql" / "supabase_base.sql"
LEDGER_TABLES = "public.users, public.notes, public.promo_codes, public.organizations"


class LedgerDatabase:
    """A migrated Postgres database plus helpers to seed and inspect it."""

    def __init__(self, dsn: str) -> None:
        self.dsn = dsn
        self.conn: Any = None

    def connect(self) -> Any:
        import psycopg
        from psycopg.rows import dict_row

        return psycopg.connect(self.dsn, autocommit=True, row_factory=dict_row)

    def row(self, query: str, params: tuple[Any, ...] = ()) -> dict[str, Any] | None:
        return self.conn.execute(query, params).fetchone()

    def rows(self, query: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        return self.conn.execute(query, params).fetchall()

    def count(self, table: str) -> int:
        return self.row(f"SELECT count(*) AS n FROM public.{table}")["n"]

    def add_user(self, points: int = 0, dollars: Decimal = Decimal("0")) -> uuid.UUID:
        user_id = uuid.uuid4()
        self.conn.execute(
            "INSERT INTO public.users (id, email, points_balance, dollar_balance) "
            "VALUES (%s, %s, %s, %s)",
            (user_id, f"{user_id.hex[:10]}@example.com", points, dollars),
        )
        return user_id

    def add_note(
        self,
        author_id: uuid.UUID,
        price: Decimal = Decimal("10.00"),
        is_exclusive: bool = False,
        is_published: bool = True,
    ) -> uuid.UUID:
        note_id = uuid.uuid4()
        self.conn.execute(
            "INSERT INTO public.notes (id, user_id, price, is_exclusive, is_published) "
            "VALUES (%s, %s, %s, %s, %s)",
            (note_id, author_id, price, is_exclusive, is_published),
        )
        return note_id

    def add_promo(
        self,
        code: str,
        points: int,
        max_uses: int | None = None,
        current_uses: int = 0,
        expires_at: datetime | None = None,
        is_active: bool = True,
    ) -> uuid.UUID:
        promo_id = uuid.uuid4()
        self.conn.execute(
            "INSERT INTO public.promo_codes "
            "(id, code, points_amount, max_uses, current_uses, expires_at, is_active) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s)",
            (promo_id, code, points, max_uses, current_uses, expires_at, is_active),
        )
        return promo_id

    def balances(self, user_id: uuid.UUID) -> tuple[int, Decimal]:
        row = self.row(
            "SELECT points_balance, dollar_balance FROM public.users WHERE id = %s", (user_id,)
        )
        return row["points_balance"], row["dollar_balance"]


@pytest.fixture(scope="session")
def ledger_dsn() -> Iterator[str]:
    """Create a throwaway database with every migration applied.

    ``TEST_DATABASE_URL`` must point at a Postgres 13+ server whose role may
    create databases; the database-backed tests are skipped without it.
    """
    admin_url = os.environ.get("TEST_DATABASE_URL")
    if not admin_url:
        pytest.skip("TEST_DATABASE_URL is not set")
    psycopg = pytest.importorskip("psycopg")
    from psycopg import sql
    from psycopg.conninfo import make_conninfo

    name = f"notemarket_test_{uuid.uuid4().hex[:12]}"
    with psycopg.connect(admin_url, autocommit=True) as admin:
        admin.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(name)))

    dsn = make_conninfo(admin_url, dbname=name)
    try:
        with psycopg.connect(dsn, autocommit=True) as conn:
            conn.execute(BASE_SCHEMA.read_text())
            for migration in sorted((ROOT / "migrations").glob("*.sql")):
                conn.execute(migration.read_text())
        yield dsn
    finally:
        with psycopg.connect(admin_url, autocommit=True) as admin:
            admin.execute(
                sql.SQL("DROP DATABASE IF EXISTS {} WITH (FORCE)").format(sql.Identifier(name))
            )


@pytest.fixture
def ledger_db(ledger_dsn: str) -> Iterator[LedgerDatabase]:
    """Return the migrated database, emptied before each test."""
    db = LedgerDatabase(ledger_dsn)
    with db.connect() as conn:
        conn.execute(f"TRUNCATE {LEDGER_TABLES} CASCADE")
        db.conn = conn
        yield db
