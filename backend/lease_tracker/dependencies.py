"""Reusable FastAPI dependency providers."""

from __future__ import annotations

from typing import Annotated, Any, Awaitable, Callable

from fastapi import BackgroundTasks, Depends, Header, HTTPException, Request, status

from .backend import BackendClient, SupabaseBackend, create_supabase_backend, create_viewer_backend
from .clipboard import ResponseClipboard
from .config import (
    BackendCredentials,
    ConfigurationError,
    load_backend_credentials,
    resolve_public_origin,
)
from .controller import ProjectPageController
from .identity import AuthState, IdentityProvider, SupabaseIdentityProvider
from .repositories.preferences import PreferencesRepository


class DeferredWork:
    """Coroutine calls queued during a request and run after the response.

    Queued calls run in order, then the cleanups, even when a call fails.
    """

    def __init__(self) -> None:
        self._calls: list[tuple[Callable[..., Awaitable[Any]], tuple[Any, ...]]] = []
        self._cleanups: list[Callable[[], Awaitable[None]]] = []

    def __call__(self, func: Callable[..., Awaitable[Any]], *args: Any) -> None:
        self._calls.append((func, args))

    def add_cleanup(self, func: Callable[[], Awaitable[None]]) -> None:
        self._cleanups.append(func)

    async def run(self) -> None:
        try:
            for func, args in self._calls:
                await func(*args)
        finally:
            for cleanup in self._cleanups:
                await cleanup()


def get_deferred_work(background_tasks: BackgroundTasks) -> DeferredWork:
    work = DeferredWork()
    background_tasks.add_task(work.run)
    return work


def _credentials() -> BackendCredentials:
    try:
        return load_backend_credentials()
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Backend connection not configured.",
        ) from exc


async def get_backend(request: Request) -> BackendClient:
    """Return the application's key-only backend client, connecting on first use.

    It serves public share reads and token checks; viewer data goes through
    :func:`get_viewer_backend`.
    """

    backend = getattr(request.app.state, "backend", None)
    if backend is None:
        backend = await create_supabase_backend(_credentials())
        request.app.state.backend = backend
    return backend


async def get_identity_provider(
    backend: Annotated[BackendClient, Depends(get_backend)],
) -> IdentityProvider:
    if not isinstance(backend, SupabaseBackend):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Identity provider not configured.",
        )
    return SupabaseIdentityProvider(backend.client)


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_access_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    return _bearer_token(authorization)


async def get_auth_state(
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    access_token: Annotated[str | None, Depends(get_access_token)],
) -> AuthState:
    """Resolve the caller's identity from the ``Authorization`` header."""

    return await provider.resolve(access_token)


async def get_viewer_backend(
    access_token: Annotated[str | None, Depends(get_access_token)],
    work: Annotated[DeferredWork, Depends(get_deferred_work)],
) -> BackendClient:
    """Return a backend that queries as the caller, closed after deferred work.

    Callers without a token are never signed in, so nothing is queried on
    their behalf; they get a client that carries only the project key.
    """

    credentials = _credentials()
    backend = create_viewer_backend(credentials, access_token or credentials.key)
    work.add_cleanup(backend.aclose)
    return backend


def get_preferences() -> PreferencesRepository:
    return PreferencesRepository()


def get_public_origin() -> str:
    try:
        return resolve_public_origin()
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Public origin misconfigured.",
        ) from exc


def get_response_clipboard() -> ResponseClipboard:
    return ResponseClipboard()


def get_page_controller(
    backend: Annotated[BackendClient, Depends(get_viewer_backend)],
    auth: Annotated[AuthState, Depends(get_auth_state)],
    preferences: Annotated[PreferencesRepository, Depends(get_preferences)],
    public_origin: Annotated[str, Depends(get_public_origin)],
    clipboard: Annotated[ResponseClipboard, Depends(get_response_clipboard)],
    work: Annotated[DeferredWork, Depends(get_deferred_work)],
) -> ProjectPageController:
    """Build a page controller whose deferred writes run after the response."""

    return ProjectPageController(
        backend=backend,
        auth=auth,
        preferences=preferences,
        public_origin=public_origin,
        defer=work,
        clipboard=clipboard,
    )
