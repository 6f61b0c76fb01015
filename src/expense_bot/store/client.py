"""Async PostgREST (Supabase) client for expense and message tables.

Wraps httpx with the Supabase service-role headers and a short timeout
suitable for a synchronous webhook handler. Every call is a single attempt:
inserts are never retried because a retry after an ambiguous failure can
write the same expense twice.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from expense_bot.config import Settings

_client: "RecordStore | None" = None


class StoreError(Exception):
    """Raised when a store call fails, times out, or returns an unusable body."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409


@dataclass(frozen=True)
class Filter:
    """A PostgREST column filter, rendered as ``column=op.value``."""

    column: str
    op: str
    value: str

    @classmethod
    def eq(cls, column: str, value: object) -> "Filter":
        return cls(column, "eq", _render(value))

    @classmethod
    def gte(cls, column: str, value: object) -> "Filter":
        return cls(column, "gte", _render(value))

    @classmethod
    def not_null(cls, column: str) -> "Filter":
        return cls(column, "not.is", "null")

    def as_param(self) -> tuple[str, str]:
        return self.column, f"{self.op}.{self.value}"


def _render(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RecordStore:
    """Minimal table API: insert, query, update, delete."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored (with its generated id)."""
        rows = await self._request(
            "POST", table, json=record, headers={"Prefer": "return=representation"}
        )
        if not rows:
            raise StoreError(f"Insert into {table} returned no row")
        return rows[0]

    async def query(
        self,
        table: str,
        filters: list[Filter] | None = None,
        order: str | None = None,
        descending: bool = True,
        limit: int | None = None,
        select: str = "*",
    ) -> list[dict[str, Any]]:
        params = [("select", select), *(f.as_param() for f in filters or [])]
        if order:
            params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._request("GET", table, params=params)

    async def update(
        self, table: str, filters: list[Filter], values: dict[str, Any]
    ) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("update requires at least one filter")
        return await self._request(
            "PATCH",
            table,
            params=[f.as_param() for f in filters],
            json=values,
            headers={"Prefer": "return=representation"},
        )

    async def delete(self, table: str, filters: list[Filter]) -> dict[str, Any] | None:
        """Delete matching rows; return the first deleted row, or None if nothing matched."""
        if not filters:
            raise ValueError("delete requires at least one filter")
        rows = await self._request(
            "DELETE",
            table,
            params=[f.as_param() for f in filters],
            headers={"Prefer": "return=representation"},
        )
        return rows[0] if rows else None

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, table: str, **kwargs: Any) -> list[dict[str, Any]]:
        try:
            response = await self._http.request(method, f"/{table}", **kwargs)
        except httpx.TimeoutException as exc:
            raise StoreError(f"{method} {table} timed out") from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {table} failed: {exc}") from exc

        if response.is_error:
            raise StoreError(
                f"{method} {table} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        if not response.content:
            return []
        try:
            body = response.json()
        except ValueError as exc:
            raise StoreError(f"{method} {table} returned invalid JSON") from exc
        if isinstance(body, dict):
            return [body]
        if not isinstance(body, list):
            raise StoreError(f"{method} {table} returned unexpected body")
        return body


def get_record_store(settings: Settings) -> RecordStore:
    """Return a cached RecordStore built from settings on first call."""
    global _client
    if _client is None:
        _client = RecordStore(
            base_url=settings.supabase_url,
            api_key=settings.supabase_service_role_key,
            timeout=settings.store_timeout_seconds,
        )
    return _client


async def close_record_store() -> None:
    """Close the cached store's connection pool (application shutdown)."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def reset_client() -> None:
    """Reset the cached store instance. Used for testing."""
    global _client
    _client = None
