from __future__ import annotations

from pathlib import Path
from typing import Annotated, Generator

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from lease_tracker.config import BACKEND_CONFIG, DATA_CONFIG, SHARE_CONFIG
from lease_tracker.dependencies import (
    get_access_token,
    get_backend,
    get_identity_provider,
    get_viewer_backend,
)
from lease_tracker.main import create_app
from lease_tracker.repositories.preferences import PreferencesRepository

from .helpers import InMemoryBackend, StaticIdentityProvider, project_row


@pytest.fixture(autouse=True)
def backend_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Configure backend credentials and a fixed public origin for every test."""

    monkeypatch.setenv(BACKEND_CONFIG.url_env_var, "https://lease-tracker.supabase.co")
    monkeypatch.setenv(BACKEND_CONFIG.key_env_var, "service-key")
    monkeypatch.setenv(SHARE_CONFIG.public_origin_env_var, "https://app.example.com")


@pytest.fixture(autouse=True)
def db_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the preference store at an isolated SQLite file for each test."""

    path = tmp_path / "preferences.db"
    monkeypatch.setenv(DATA_CONFIG.sqlite_path_env_var, str(path))
    return path


@pytest.fixture()
def preferences(db_path: Path) -> PreferencesRepository:
    return PreferencesRepository(db_path)


@pytest.fixture()
def backend() -> InMemoryBackend:
    return InMemoryBackend(
        tables={
            "projects": [
                project_row("project-1"),
                project_row("project-shared", public_share_id="share-123"),
                project_row("project-deleted", deleted_at="2024-05-01T00:00:00+00:00"),
            ],
            "project_updates": [
                {"id": "u1", "project_id": "project-1", "update_date": "2024-06-01", "title": "LOI sent"},
            ],
            "properties": [
                {"id": "p2", "project_id": "project-1", "order_key": "a2", "address": "3 Pier Rd"},
                {"id": "p0", "project_id": "project-1", "order_key": "a0", "address": "1 Dock St"},
                {"id": "p1", "project_id": "project-1", "order_key": "a1", "address": "2 Quay Ave"},
            ],
        },
        procedures={
            "get_public_properties": {
                "share-123": [
                    {"id": "s1", "order_key": "a1", "address": "9 Harbour Ln"},
                    {"id": "s0", "order_key": "a0", "address": "8 Harbour Ln"},
                ],
            },
        },
    )


@pytest.fixture()
def client(backend: InMemoryBackend) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client wired to the in-memory backend.

    Viewer-scoped requests reuse the same backend and record the caller's token.
    """

    async def viewer_backend(
        access_token: Annotated[str | None, Depends(get_access_token)],
    ) -> InMemoryBackend:
        backend.access_tokens.append(access_token)
        return backend

    app = create_app()
    app.dependency_overrides[get_backend] = lambda: backend
    app.dependency_overrides[get_viewer_backend] = viewer_backend
    app.dependency_overrides[get_identity_provider] = StaticIdentityProvider
    with TestClient(app) as test_client:
        yield test_client
