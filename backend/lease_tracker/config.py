"""Configuration helpers for the dashboard service.

This module centralises runtime configuration. Backend credentials are
expected to be provided via environment variables so they never land in
source control.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Final


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class BackendConfig:
    """Connection settings for the hosted backend.

    Attributes:
        url_env_var: Name of the environment variable holding the project URL
            of the hosted backend (e.g. ``https://xyz.supabase.co``).
        key_env_var: Name of the environment variable holding the API key the
            service uses for table queries and remote procedure calls.
    """

    url_env_var: str = "LEASE_TRACKER_SUPABASE_URL"
    key_env_var: str = "LEASE_TRACKER_SUPABASE_KEY"


BACKEND_CONFIG: Final = BackendConfig()


@dataclass(frozen=True)
class ShareConfig:
    """Settings used to derive public share links."""

    public_origin_env_var: str = "LEASE_TRACKER_PUBLIC_ORIGIN"
    default_public_origin: str = "http://localhost:5173"


SHARE_CONFIG: Final = ShareConfig()


@dataclass(frozen=True)
class DataConfig:
    """Configuration for the local preference store."""

    sqlite_path_env_var: str = "LEASE_TRACKER_DB_PATH"
    default_sqlite_path: Path = Path("var/sqlite/preferences.db")


DATA_CONFIG: Final = DataConfig()


@dataclass(frozen=True)
class BackendCredentials:
    url: str
    key: str


def load_backend_credentials() -> BackendCredentials:
    """Load the hosted backend URL and API key from the environment.

    Raises:
        ConfigurationError: If either value is missing or the URL is not an
            HTTP(S) address.
    """

    url = os.environ.get(BACKEND_CONFIG.url_env_var, "").strip()
    key = os.environ.get(BACKEND_CONFIG.key_env_var, "").strip()
    if not url:
        raise ConfigurationError(
            f"Backend URL missing. Set the environment variable {BACKEND_CONFIG.url_env_var}."
        )
    if not key:
        raise ConfigurationError(
            f"Backend API key missing. Set the environment variable {BACKEND_CONFIG.key_env_var}."
        )
    if not url.startswith(("http://", "https://")):
        raise ConfigurationError("Backend URL must be an http(s) address.")

    return BackendCredentials(url=url.rstrip("/"), key=key)


def resolve_public_origin() -> str:
    """Return the origin used when deriving public share URLs."""

    origin = os.environ.get(SHARE_CONFIG.public_origin_env_var, "").strip()
    if not origin:
        return SHARE_CONFIG.default_public_origin
    if not origin.startswith(("http://", "https://")):
        raise ConfigurationError("Public origin must be an http(s) address.")
    return origin.rstrip("/")


def resolve_sqlite_path() -> Path:
    """Return the configured path to the SQLite preference database.

    The path is resolved on demand so tests can override the environment
    variable before instantiating application components.
    """

    env_var = DATA_CONFIG.sqlite_path_env_var
    candidate = os.environ.get(env_var)
    if candidate:
        return Path(candidate).expanduser().resolve()
    return DATA_CONFIG.default_sqlite_path.expanduser().resolve()
