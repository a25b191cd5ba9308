"""Project records held by the hosted backend."""

from __future__ import annotations

from typing import Sequence

from pydantic import ValidationError

from ..backend import BackendClient, BackendError
from ..cards import serialise_card_order
from ..models import Project, ProjectCard


PROJECTS_TABLE = "projects"


class ProjectNotFoundError(LookupError):
    """Raised when a project is missing, soft-deleted or unreadable."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


NOT_VISIBLE_MESSAGE = (
    "The project you're looking for doesn't exist or you don't have permission to view it."
)
LOAD_FAILED_MESSAGE = "Failed to load project"


class ProjectsRepository:
    """Reads and selectively updates project rows."""

    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    async def get_project(self, project_id: str) -> Project:
        """Fetch a live (not soft-deleted) project.

        Raises:
            ProjectNotFoundError: If the lookup fails or matches nothing.
        """

        try:
            rows = await self._backend.select_rows(
                PROJECTS_TABLE,
                filters={"id": project_id},
                null_columns=("deleted_at",),
                limit=1,
            )
        except BackendError as exc:
            raise ProjectNotFoundError(LOAD_FAILED_MESSAGE) from exc

        if not rows:
            raise ProjectNotFoundError(NOT_VISIBLE_MESSAGE)

        try:
            return Project.model_validate(rows[0])
        except ValidationError as exc:
            raise ProjectNotFoundError(LOAD_FAILED_MESSAGE) from exc

    async def save_card_order(self, project_id: str, cards: Sequence[ProjectCard]) -> None:
        await self._backend.update_rows(
            PROJECTS_TABLE,
            {"dashboard_card_order": serialise_card_order(cards)},
            filters={"id": project_id},
        )

    async def set_share_id(self, project_id: str, share_id: str) -> None:
        await self._backend.update_rows(
            PROJECTS_TABLE,
            {"public_share_id": share_id},
            filters={"id": project_id},
        )
