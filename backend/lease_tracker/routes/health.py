"""Health check endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ..dependencies import get_preferences
from ..models import HealthResponse
from ..repositories.preferences import PreferencesRepository

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(
    preferences: Annotated[PreferencesRepository, Depends(get_preferences)],
) -> HealthResponse:
    """Report that the service is up and the preference store is readable."""

    return HealthResponse(status="ok", stored_preferences=preferences.count())
