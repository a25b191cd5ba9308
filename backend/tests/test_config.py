from __future__ import annotations

import pytest

from lease_tracker.config import (
    BACKEND_CONFIG,
    SHARE_CONFIG,
    ConfigurationError,
    load_backend_credentials,
    resolve_public_origin,
)


def test_credentials_loaded_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BACKEND_CONFIG.url_env_var, "https://example.supabase.co/")
    credentials = load_backend_credentials()
    assert credentials.url == "https://example.supabase.co"
    assert credentials.key == "service-key"


@pytest.mark.parametrize("env_var", [BACKEND_CONFIG.url_env_var, BACKEND_CONFIG.key_env_var])
def test_missing_credentials_raise(monkeypatch: pytest.MonkeyPatch, env_var: str) -> None:
    monkeypatch.delenv(env_var)
    with pytest.raises(ConfigurationError, match=env_var):
        load_backend_credentials()


def test_backend_url_must_be_http(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BACKEND_CONFIG.url_env_var, "ftp://example.com")
    with pytest.raises(ConfigurationError):
        load_backend_credentials()


def test_public_origin_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(SHARE_CONFIG.public_origin_env_var)
    assert resolve_public_origin() == SHARE_CONFIG.default_public_origin


def test_public_origin_strips_trailing_slash(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(SHARE_CONFIG.public_origin_env_var, "https://leases.example.com/")
    assert resolve_public_origin() == "https://leases.example.com"


def test_public_origin_rejects_bare_host(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(SHARE_CONFIG.public_origin_env_var, "leases.example.com")
    with pytest.raises(ConfigurationError):
        resolve_public_origin()
