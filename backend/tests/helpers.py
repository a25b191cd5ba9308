from __future__ import annotations

import copy
from typing import Any, Mapping, Sequence

from lease_tracker.backend import BackendError, OrderBy, Row
from lease_tracker.clipboard import ClipboardError
from lease_tracker.identity import ANONYMOUS, AuthState, Viewer


VIEWER = Viewer(id="user-1", email="agent@example.com")
SIGNED_IN = AuthState(is_loaded=True, user=VIEWER)
VALID_TOKEN = "valid-token"


class InMemoryBackend:
    """Backend stand-in that returns rows in insertion order and records calls.

    Ordering requests are recorded but not applied, so tests can check that
    callers sort results themselves.
    """

    def __init__(
        self,
        tables: Mapping[str, Sequence[Row]] | None = None,
        procedures: Mapping[str, Mapping[str, Sequence[Row]]] | None = None,
    ) -> None:
        self.tables: dict[str, list[Row]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.procedures: dict[str, dict[str, list[Row]]] = {
            name: {share_id: [dict(row) for row in rows] for share_id, rows in by_share.items()}
            for name, by_share in (procedures or {}).items()
        }
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.failures: dict[str, str] = {}
        self.access_tokens: list[str | None] = []

    def fail(self, operation: str, name: str, message: str = "permission denied") -> None:
        self.failures[f"{operation}:{name}"] = message

    def _maybe_fail(self, operation: str, name: str) -> None:
        message = self.failures.get(f"{operation}:{name}")
        if message is not None:
            raise BackendError(message)

    async def select_rows(
        self,
        table: str,
        *,
        filters: Mapping[str, Any],
        null_columns: Sequence[str] = (),
        order: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        self.calls.append(
            ("select", table, {"filters": dict(filters), "null_columns": tuple(null_columns), "order": order})
        )
        self._maybe_fail("select", table)
        rows = [
            copy.deepcopy(row)
            for row in self.tables.get(table, [])
            if all(row.get(column) == value for column, value in filters.items())
            and all(row.get(column) is None for column in null_columns)
        ]
        return rows[:limit] if limit is not None else rows

    async def call_procedure(self, function: str, params: Mapping[str, Any]) -> list[Row]:
        self.calls.append(("rpc", function, dict(params)))
        self._maybe_fail("rpc", function)
        return copy.deepcopy(self.procedures.get(function, {}).get(params.get("share_id"), []))

    async def update_rows(
        self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]
    ) -> list[Row]:
        self.calls.append(("update", table, {"values": dict(values), "filters": dict(filters)}))
        self._maybe_fail("update", table)
        updated = []
        for row in self.tables.get(table, []):
            if all(row.get(column) == value for column, value in filters.items()):
                row.update(copy.deepcopy(dict(values)))
                updated.append(copy.deepcopy(row))
        return updated

    def calls_for(self, operation: str) -> list[tuple[str, str, dict[str, Any]]]:
        return [call for call in self.calls if call[0] == operation]


class StaticIdentityProvider:
    """Accepts :data:`VALID_TOKEN` and treats every other caller as anonymous."""

    async def resolve(self, access_token: str | None) -> AuthState:
        if access_token == VALID_TOKEN:
            return SIGNED_IN
        return ANONYMOUS


class RecordingClipboard:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.writes: list[str] = []

    async def write_text(self, text: str) -> None:
        if self.fail:
            raise ClipboardError("clipboard permission denied")
        self.writes.append(text)


class RecordingSelectionClipboard:
    def __init__(self, *, succeed: bool = True) -> None:
        self.succeed = succeed
        self.copies: list[str] = []

    def select_and_copy(self, text: str) -> bool:
        self.copies.append(text)
        return self.succeed


class DeferredCalls:
    """Collects work a controller defers so tests can run it on demand."""

    def __init__(self) -> None:
        self.pending: list[tuple[Any, tuple[Any, ...]]] = []

    def __call__(self, func: Any, *args: Any) -> None:
        self.pending.append((func, args))

    async def run_all(self) -> list[Any]:
        results = []
        while self.pending:
            func, args = self.pending.pop(0)
            results.append(await func(*args))
        return results


def auth_headers(token: str = VALID_TOKEN) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def project_row(project_id: str = "project-1", **fields: Any) -> Row:
    row: Row = {
        "id": project_id,
        "name": "Harbor Street Lease",
        "client_name": "Acme Logistics",
        "deleted_at": None,
        "public_share_id": None,
        "dashboard_card_order": None,
    }
    row.update(fields)
    return row
