"""Shared test fixtures."""

import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from expense_bot.app import app
from expense_bot.config import Settings
from expense_bot.store.client import Filter, StoreError

TEST_CHANNEL_SECRET = "test_channel_secret_1234"


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a TestClient for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        line_channel_secret=TEST_CHANNEL_SECRET,
        line_channel_access_token="test-access-token",
        line_group_id="G_GROUP",
        supabase_url="https://example.supabase.co",
        supabase_service_role_key="service-role-key",
        scheduler_secret="test-secret",
    )


def sign(body: bytes, secret: str = TEST_CHANNEL_SECRET) -> str:
    """Compute the X-Line-Signature value for a body."""
    digest = hmac.new(secret.encode(), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def _render(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _matches(row: dict, f: Filter) -> bool:
    value = row.get(f.column)
    if f.op == "eq":
        return value is not None and _render(value) == f.value
    if f.op == "gte":
        return value is not None and str(value) >= f.value
    if f.op == "not.is":
        return value is not None
    raise AssertionError(f"unsupported filter op {f.op}")


class InMemoryStore:
    """RecordStore stand-in with PostgREST-like filter, order and limit semantics.

    Add "insert", "query", "update", "delete" or "<op>:<table>" to
    ``fail_on`` to make those calls raise StoreError.
    """

    def __init__(self, tables: dict[str, list[dict]] | None = None):
        self.tables: dict[str, list[dict]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.inserts: list[tuple[str, dict]] = []
        self.fail_on: set[str] = set()
        self._next_id = 1000
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _check(self, op: str, table: str) -> None:
        if op in self.fail_on or f"{op}:{table}" in self.fail_on:
            raise StoreError(f"{op} {table} failed", status_code=500)

    def rows(self, table: str) -> list[dict]:
        return self.tables.setdefault(table, [])

    def inserted(self, table: str) -> list[dict]:
        return [record for name, record in self.inserts if name == table]

    async def insert(self, table: str, record: dict) -> dict:
        self._check("insert", table)
        self.inserts.append((table, record))
        self._next_id += 1
        self._clock += timedelta(seconds=1)
        row = {"id": self._next_id, "created_at": self._clock.isoformat(), **record}
        self.rows(table).append(row)
        return dict(row)

    async def query(
        self,
        table: str,
        filters: list[Filter] | None = None,
        order: str | None = None,
        descending: bool = True,
        limit: int | None = None,
        select: str = "*",
    ) -> list[dict]:
        self._check("query", table)
        rows = [r for r in self.rows(table) if all(_matches(r, f) for f in filters or [])]
        if order:
            # PostgreSQL default: NULLs last ascending, first descending
            rows.sort(
                key=lambda r: (r.get(order) is None, str(r.get(order) or "")),
                reverse=descending,
            )
        if limit is not None:
            rows = rows[:limit]
        return [dict(r) for r in rows]

    async def update(self, table: str, filters: list[Filter], values: dict) -> list[dict]:
        self._check("update", table)
        updated = []
        for row in self.rows(table):
            if all(_matches(row, f) for f in filters):
                row.update(values)
                updated.append(dict(row))
        return updated

    async def delete(self, table: str, filters: list[Filter]) -> dict | None:
        self._check("delete", table)
        for row in self.rows(table):
            if all(_matches(row, f) for f in filters):
                self.rows(table).remove(row)
                return dict(row)
        return None


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def make_store():
    """Factory for an InMemoryStore pre-seeded with table rows."""
    return InMemoryStore


@pytest.fixture
def signer():
    """Function computing a valid X-Line-Signature for a body."""
    return sign
