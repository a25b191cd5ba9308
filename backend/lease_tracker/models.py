"""Pydantic models used by the dashboard service."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Response payload for service health checks."""

    status: str = Field(..., description="Human-readable service status message.")
    stored_preferences: int = Field(
        ..., description="Number of preference entries held in the local store.", ge=0
    )


CardType = Literal["updates", "availability", "properties", "roadmap", "documents"]


class ProjectCard(BaseModel):
    """A reorderable dashboard card."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: CardType
    title: str
    order_key: str = Field(..., description="Lexicographically sortable position key.")


class Project(BaseModel):
    """Project record as stored by the hosted backend.

    Only the fields this service reads or writes are declared; the remaining
    domain columns are carried through untouched.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    deleted_at: datetime | None = None
    public_share_id: str | None = None
    dashboard_card_order: Any = Field(
        None, description="Stored card order; may predate order keys or be malformed."
    )


class FetchResponse(BaseModel):
    """Uniform result of a data fetch for a single data type."""

    data_type: str
    data: list[dict[str, Any]] = Field(default_factory=list)
    loading: bool = False
    error: str | None = None
    is_public_mode: bool = False
    is_authenticated_mode: bool = False


class DashboardCard(BaseModel):
    """A card descriptor together with the data backing it."""

    card: ProjectCard
    data_type: str
    content: FetchResponse


class DashboardResponse(BaseModel):
    project: Project
    cards: list[DashboardCard]
    share_url: str | None = Field(
        None, description="Public link for the project if one has been provisioned."
    )


class CardReorderRequest(BaseModel):
    """Payload describing a drag-and-drop move."""

    source_index: int = Field(..., ge=0)
    destination_index: int = Field(..., ge=0)


class CardOrderResponse(BaseModel):
    cards: list[ProjectCard]


class ShareResponse(BaseModel):
    """Outcome of a share action."""

    share_id: str
    url: str
    copied_text: str | None = Field(
        None, description="Text the client should place on the user's clipboard."
    )
    persisted: bool = Field(
        ..., description="Whether the share identifier is stored on the project record."
    )
    reused: bool = Field(..., description="True when an existing share identifier was reused.")
