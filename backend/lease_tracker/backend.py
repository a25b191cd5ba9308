"""Access to the hosted backend's table and remote procedure interfaces."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

import httpx
from postgrest import AsyncPostgrestClient
from postgrest.constants import DEFAULT_POSTGREST_CLIENT_HEADERS
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from .config import BackendCredentials


logger = logging.getLogger(__name__)

Row = dict[str, Any]

REST_PATH = "/rest/v1"


class BackendError(RuntimeError):
    """Raised when a backend query or remote procedure call fails."""


@dataclass(frozen=True)
class OrderBy:
    column: str
    ascending: bool = True


class BackendClient(Protocol):
    """Operations the service needs from the hosted backend."""

    async def select_rows(
        self,
        table: str,
        *,
        filters: Mapping[str, Any],
        null_columns: Sequence[str] = (),
        order: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        """Return ``*`` from ``table`` where every filter matches."""

    async def call_procedure(self, function: str, params: Mapping[str, Any]) -> list[Row]:
        """Invoke a remote procedure and return its rows."""

    async def update_rows(
        self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]
    ) -> list[Row]:
        """Apply ``values`` to matching rows and return the updated rows."""


def _rows(payload: Any) -> list[Row]:
    if payload is None:
        return []
    items = payload if isinstance(payload, list) else [payload]
    if not all(isinstance(item, Mapping) for item in items):
        raise BackendError("Unexpected response payload.")
    return [dict(item) for item in items]


class SupabaseBackend:
    """:class:`BackendClient` backed by the ``supabase`` async client.

    Also accepts a bare PostgREST client, which is how per-viewer backends
    are built.
    """

    def __init__(self, client: AsyncClient | AsyncPostgrestClient) -> None:
        self._client = client

    @property
    def client(self) -> AsyncClient | AsyncPostgrestClient:
        return self._client

    async def aclose(self) -> None:
        """Release the HTTP session of a per-viewer client."""

        if isinstance(self._client, AsyncPostgrestClient):
            await self._client.aclose()

    async def select_rows(
        self,
        table: str,
        *,
        filters: Mapping[str, Any],
        null_columns: Sequence[str] = (),
        order: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        query = self._client.table(table).select("*")
        for column, value in filters.items():
            query = query.eq(column, value)
        for column in null_columns:
            query = query.is_(column, "null")
        if order is not None:
            query = query.order(order.column, desc=not order.ascending)
        if limit is not None:
            query = query.limit(limit)
        return await self._execute(query, f"select {table}")

    async def call_procedure(self, function: str, params: Mapping[str, Any]) -> list[Row]:
        return await self._execute(self._client.rpc(function, dict(params)), f"rpc {function}")

    async def update_rows(
        self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]
    ) -> list[Row]:
        query = self._client.table(table).update(dict(values))
        for column, value in filters.items():
            query = query.eq(column, value)
        return await self._execute(query, f"update {table}")

    async def _execute(self, query: Any, label: str) -> list[Row]:
        try:
            response = await query.execute()
        except APIError as exc:
            logger.warning("Backend %s failed: %s", label, exc.message)
            raise BackendError(exc.message or "Backend request failed.") from exc
        except httpx.HTTPError as exc:
            logger.warning("Backend %s unreachable: %s", label, exc)
            raise BackendError("Backend service is unreachable.") from exc
        return _rows(response.data)


async def create_supabase_backend(credentials: BackendCredentials) -> SupabaseBackend:
    """Create a :class:`SupabaseBackend` for the configured project."""

    client = await acreate_client(credentials.url, credentials.key)
    return SupabaseBackend(client)


def create_viewer_backend(credentials: BackendCredentials, access_token: str) -> SupabaseBackend:
    """Create a backend whose table reads and writes run as the token's user.

    The configured key only identifies the project; row-level policies are
    evaluated against ``access_token``. Call :meth:`SupabaseBackend.aclose`
    when done.
    """

    headers = {
        **DEFAULT_POSTGREST_CLIENT_HEADERS,
        "apikey": credentials.key,
        "Authorization": f"Bearer {access_token}",
    }
    return SupabaseBackend(AsyncPostgrestClient(f"{credentials.url}{REST_PATH}", headers=headers))
