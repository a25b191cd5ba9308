"""Project dashboard endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from ..backend import BackendClient
from ..cards import CardOrderError
from ..clipboard import ClipboardCopyError, ResponseClipboard
from ..controller import PagePhase, ProjectPageController
from ..dependencies import (
    get_auth_state,
    get_page_controller,
    get_response_clipboard,
    get_viewer_backend,
)
from ..fetcher import ProjectDataFetcher
from ..identity import AuthState
from ..models import (
    CardOrderResponse,
    CardReorderRequest,
    DashboardResponse,
    FetchResponse,
    ShareResponse,
)


router = APIRouter(prefix="/projects", tags=["projects"])

ControllerDep = Annotated[ProjectPageController, Depends(get_page_controller)]


def _redirect(location: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_303_SEE_OTHER,
        detail="Sign in to view this project.",
        headers={"Location": location},
    )


async def _open_page(controller: ProjectPageController, project_id: str) -> None:
    """Activate the page, raising for every outcome other than ready."""

    outcome = await controller.activate(project_id)
    if outcome.phase is PagePhase.READY:
        return
    if outcome.phase is PagePhase.LOADING:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity provider unavailable. Please try again.",
        )
    if outcome.phase is PagePhase.REDIRECT:
        raise _redirect(outcome.redirect_to or "/")
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"message": outcome.message, "back_url": outcome.redirect_to},
    )


@router.get(
    "/{project_id}",
    response_model=DashboardResponse,
    summary="Render a project's dashboard",
)
async def get_dashboard(project_id: str, controller: ControllerDep) -> DashboardResponse:
    """Return the project with its cards in the viewer's order and their data."""

    await _open_page(controller, project_id)
    cards = await controller.render_cards()
    return DashboardResponse(project=controller.project, cards=cards, share_url=controller.share_url())


@router.get(
    "/{project_id}/data/{data_type}",
    response_model=FetchResponse,
    summary="Fetch one data type for a project",
)
async def get_project_data(
    project_id: str,
    data_type: str,
    backend: Annotated[BackendClient, Depends(get_viewer_backend)],
    auth: Annotated[AuthState, Depends(get_auth_state)],
) -> FetchResponse:
    """Run the authenticated query for ``data_type``; failures land in ``error``."""

    if not auth.is_signed_in:
        raise _redirect("/")
    fetcher = ProjectDataFetcher(backend, data_type=data_type, project_id=project_id, viewer=auth.user)
    return await fetcher.fetch()


@router.put(
    "/{project_id}/card-order",
    response_model=CardOrderResponse,
    summary="Move a dashboard card",
)
async def reorder_cards(
    project_id: str,
    payload: CardReorderRequest,
    controller: ControllerDep,
) -> CardOrderResponse:
    """Apply a move immediately; the project record is updated after the response."""

    await _open_page(controller, project_id)
    try:
        cards = controller.reorder(payload.source_index, payload.destination_index)
    except CardOrderError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return CardOrderResponse(cards=cards)


@router.post(
    "/{project_id}/share",
    response_model=ShareResponse,
    summary="Create or reuse the project's public share link",
)
async def share_project(
    project_id: str,
    controller: ControllerDep,
    clipboard: Annotated[ResponseClipboard, Depends(get_response_clipboard)],
) -> ShareResponse:
    """Return the share link and the text for the caller to copy.

    Answers 503 when the injected clipboard chain fails to copy the link.
    """

    await _open_page(controller, project_id)
    try:
        link = await controller.share()
    except ClipboardCopyError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return ShareResponse(
        share_id=link.share_id,
        url=link.url,
        copied_text=clipboard.text,
        persisted=link.persisted,
        reused=link.reused,
    )
