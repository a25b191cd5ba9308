"""Public, unauthenticated reads behind a share link."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ..backend import BackendClient
from ..dependencies import get_backend
from ..fetcher import ProjectDataFetcher
from ..models import FetchResponse


router = APIRouter(prefix="/share", tags=["share"])


@router.get(
    "/{share_id}/{data_type}",
    response_model=FetchResponse,
    summary="Fetch one data type through a public share link",
)
async def get_shared_data(
    share_id: str,
    data_type: str,
    backend: Annotated[BackendClient, Depends(get_backend)],
) -> FetchResponse:
    """Read-only view; the backend's public procedures enforce the share id."""

    fetcher = ProjectDataFetcher(backend, data_type=data_type, share_id=share_id)
    return await fetcher.fetch()
