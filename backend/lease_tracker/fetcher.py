"""Per-card data access for project dashboards.

A :class:`ProjectDataFetcher` is bound to one data type and to either a
project id (signed-in viewers) or a share id (public links). It issues the
query that :mod:`lease_tracker.queries` prescribes for that combination and
keeps a small ``idle -> loading -> success | error`` state that callers can
render directly.
"""

from __future__ import annotations

import enum
import logging
from typing import Any

from .backend import BackendClient, BackendError, OrderBy, Row
from .identity import Viewer
from .models import FetchResponse
from .order_keys import sort_by_order_key
from .queries import (
    ORDERED_DATA_TYPES,
    DataType,
    FetchMode,
    ProcedureCall,
    TableQuery,
    UnsupportedDataTypeError,
    parse_data_type,
    resolve_query,
)


logger = logging.getLogger(__name__)

_UNSET: Any = object()


class FetchStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class ProjectDataFetcher:
    """Fetches one data type for a project or a public share."""

    def __init__(
        self,
        backend: BackendClient,
        *,
        data_type: str | DataType,
        project_id: str | None = None,
        share_id: str | None = None,
        viewer: Viewer | None = None,
    ) -> None:
        self._backend = backend
        self._data_type = data_type
        self._project_id = project_id
        self._share_id = share_id
        self._viewer = viewer
        self._status = FetchStatus.IDLE
        self._data: list[Row] = []
        self._error: str | None = None
        # Bumped on every fetch; responses from older generations are dropped.
        self._generation = 0

    @property
    def data_type(self) -> str:
        return self._data_type.value if isinstance(self._data_type, DataType) else self._data_type

    @property
    def is_public_mode(self) -> bool:
        return bool(self._share_id)

    @property
    def is_authenticated_mode(self) -> bool:
        return bool(self._project_id and self._viewer)

    @property
    def mode(self) -> FetchMode | None:
        if self.is_public_mode:
            return FetchMode.PUBLIC
        if self.is_authenticated_mode:
            return FetchMode.AUTHENTICATED
        return None

    @property
    def status(self) -> FetchStatus:
        return self._status

    @property
    def loading(self) -> bool:
        return self._status is FetchStatus.LOADING

    @property
    def data(self) -> list[Row]:
        return list(self._data)

    @property
    def error(self) -> str | None:
        return self._error

    def snapshot(self) -> FetchResponse:
        return FetchResponse(
            data_type=self.data_type,
            data=self.data,
            loading=self.loading,
            error=self._error,
            is_public_mode=self.is_public_mode,
            is_authenticated_mode=self.is_authenticated_mode,
        )

    async def fetch(self) -> FetchResponse:
        """Run the query for the current parameters and return the new state."""

        self._generation += 1
        generation = self._generation

        mode = self.mode
        if mode is None:
            self._status = FetchStatus.IDLE
            self._data = []
            self._error = None
            return self.snapshot()

        self._status = FetchStatus.LOADING
        self._error = None
        try:
            rows = await self._load(mode)
        except (BackendError, UnsupportedDataTypeError) as exc:
            return self._fail(generation, exc)
        except Exception as exc:
            logger.exception("Unexpected failure fetching %s", self.data_type)
            return self._fail(generation, exc)

        if generation != self._generation:
            logger.debug("Discarding stale %s response", self.data_type)
            return self.snapshot()

        self._status = FetchStatus.SUCCESS
        self._data = rows
        return self.snapshot()

    refetch = fetch

    def _fail(self, generation: int, exc: Exception) -> FetchResponse:
        if generation != self._generation:
            logger.debug("Discarding stale %s error: %s", self.data_type, exc)
            return self.snapshot()
        self._status = FetchStatus.ERROR
        self._data = []
        self._error = str(exc) or "An error occurred"
        return self.snapshot()

    async def update(
        self,
        *,
        data_type: str | DataType = _UNSET,
        project_id: str | None = _UNSET,
        share_id: str | None = _UNSET,
        viewer: Viewer | None = _UNSET,
    ) -> FetchResponse:
        """Change parameters, fetching again only when something changed."""

        changed = False
        for name, value in (
            ("_data_type", data_type),
            ("_project_id", project_id),
            ("_share_id", share_id),
            ("_viewer", viewer),
        ):
            if value is _UNSET or getattr(self, name) == value:
                continue
            setattr(self, name, value)
            changed = True

        if not changed:
            return self.snapshot()
        return await self.fetch()

    async def _load(self, mode: FetchMode) -> list[Row]:
        data_type = parse_data_type(self._data_type)
        descriptor = resolve_query(data_type, mode)

        if isinstance(descriptor, ProcedureCall):
            rows = await self._backend.call_procedure(
                descriptor.function, {"share_id": self._share_id}
            )
        elif isinstance(descriptor, TableQuery):
            rows = await self._backend.select_rows(
                descriptor.table,
                filters={"project_id": self._project_id},
                order=OrderBy(descriptor.order_column, ascending=descriptor.ascending),
            )
        else:  # pragma: no cover - QUERY_TABLE only holds the two shapes
            raise UnsupportedDataTypeError(self._data_type)

        if data_type in ORDERED_DATA_TYPES:
            rows = sort_by_order_key(rows)
        return rows
