"""Declarative mapping from data types to backend queries.

Each supported data type is reachable in two modes: authenticated reads go
straight to the owning table filtered by project, public reads go through a
remote procedure that takes the project's share identifier.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Final, Mapping, Union

from .models import CardType


class UnsupportedDataTypeError(ValueError):
    """Raised for a data-type tag that has no query route."""

    def __init__(self, data_type: object) -> None:
        super().__init__(f"Unsupported data type: {data_type}")
        self.data_type = data_type


class DataType(str, enum.Enum):
    UPDATES = "updates"
    PROPERTIES = "properties"
    ROADMAP = "roadmap"
    DOCUMENTS = "documents"
    REQUIREMENTS = "requirements"
    CLIENT_TOUR_AVAILABILITY = "client_tour_availability"


class FetchMode(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    PUBLIC = "public"


@dataclass(frozen=True)
class TableQuery:
    """Direct table read filtered by ``project_id``."""

    table: str
    order_column: str
    ascending: bool = True


@dataclass(frozen=True)
class ProcedureCall:
    """Remote procedure taking a ``share_id`` argument."""

    function: str


QueryDescriptor = Union[TableQuery, ProcedureCall]


QUERY_TABLE: Final[Mapping[tuple[DataType, FetchMode], QueryDescriptor]] = {
    (DataType.UPDATES, FetchMode.AUTHENTICATED): TableQuery(
        "project_updates", "update_date", ascending=False
    ),
    (DataType.PROPERTIES, FetchMode.AUTHENTICATED): TableQuery("properties", "order_key"),
    (DataType.ROADMAP, FetchMode.AUTHENTICATED): TableQuery("project_roadmap", "order_key"),
    (DataType.DOCUMENTS, FetchMode.AUTHENTICATED): TableQuery("project_documents", "order_key"),
    (DataType.REQUIREMENTS, FetchMode.AUTHENTICATED): TableQuery("client_requirements", "category"),
    (DataType.CLIENT_TOUR_AVAILABILITY, FetchMode.AUTHENTICATED): TableQuery(
        "client_tour_availability", "proposed_datetime"
    ),
    (DataType.UPDATES, FetchMode.PUBLIC): ProcedureCall("get_public_project_updates"),
    (DataType.PROPERTIES, FetchMode.PUBLIC): ProcedureCall("get_public_properties"),
    (DataType.ROADMAP, FetchMode.PUBLIC): ProcedureCall("get_public_project_roadmap"),
    (DataType.DOCUMENTS, FetchMode.PUBLIC): ProcedureCall("get_public_project_documents"),
    (DataType.REQUIREMENTS, FetchMode.PUBLIC): ProcedureCall("get_public_client_requirements"),
    (DataType.CLIENT_TOUR_AVAILABILITY, FetchMode.PUBLIC): ProcedureCall(
        "get_public_client_tour_availability"
    ),
}

# Results for these types are re-sorted by order key after every fetch.
ORDERED_DATA_TYPES: Final = frozenset({DataType.PROPERTIES, DataType.ROADMAP, DataType.DOCUMENTS})

CARD_DATA_TYPES: Final[Mapping[CardType, DataType]] = {
    "updates": DataType.UPDATES,
    "availability": DataType.CLIENT_TOUR_AVAILABILITY,
    "properties": DataType.PROPERTIES,
    "roadmap": DataType.ROADMAP,
    "documents": DataType.DOCUMENTS,
}


def parse_data_type(tag: str | DataType) -> DataType:
    if isinstance(tag, DataType):
        return tag
    try:
        return DataType(tag)
    except ValueError as exc:
        raise UnsupportedDataTypeError(tag) from exc


def resolve_query(data_type: str | DataType, mode: FetchMode) -> QueryDescriptor:
    """Return the query descriptor for ``data_type`` in ``mode``.

    Raises:
        UnsupportedDataTypeError: If the tag is unknown or has no route.
    """

    parsed = parse_data_type(data_type)
    descriptor = QUERY_TABLE.get((parsed, mode))
    if descriptor is None:
        raise UnsupportedDataTypeError(data_type)
    return descriptor


def missing_routes() -> list[tuple[DataType, FetchMode]]:
    """List ``(data type, mode)`` pairs without a query descriptor."""

    return [
        (data_type, mode)
        for data_type in DataType
        for mode in FetchMode
        if (data_type, mode) not in QUERY_TABLE
    ]
