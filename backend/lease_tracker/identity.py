"""Viewer identity, delegated to the hosted backend's auth service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from supabase import AsyncClient, AuthError, AuthRetryableError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Viewer:
    """The signed-in user viewing a page."""

    id: str
    email: str | None = None


@dataclass(frozen=True)
class AuthState:
    """Identity as seen by a page.

    ``is_loaded`` is false while the identity provider has not answered;
    ``user`` is ``None`` for anonymous viewers once loaded.
    """

    is_loaded: bool
    user: Viewer | None = None

    @property
    def is_signed_in(self) -> bool:
        return self.is_loaded and self.user is not None


ANONYMOUS: AuthState = AuthState(is_loaded=True, user=None)
PENDING: AuthState = AuthState(is_loaded=False, user=None)


class IdentityProvider(Protocol):
    async def resolve(self, access_token: str | None) -> AuthState:
        """Resolve a bearer token to the viewer's auth state."""


class SupabaseIdentityProvider:
    """Resolves access tokens with the backend's auth endpoint."""

    def __init__(self, client: AsyncClient) -> None:
        self._client = client

    async def resolve(self, access_token: str | None) -> AuthState:
        if not access_token:
            return ANONYMOUS

        try:
            response = await self._client.auth.get_user(access_token)
        except AuthRetryableError as exc:
            logger.warning("Identity provider unavailable: %s", exc)
            return PENDING
        except AuthError as exc:
            logger.info("Rejected access token: %s", exc)
            return ANONYMOUS
        except httpx.HTTPError as exc:
            logger.warning("Identity provider unreachable: %s", exc)
            return PENDING

        user = response.user if response is not None else None
        if user is None:
            return ANONYMOUS
        return AuthState(is_loaded=True, user=Viewer(id=str(user.id), email=user.email))
