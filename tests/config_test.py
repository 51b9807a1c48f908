"""Tests for token configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from safir.logging import LogLevel, Profile

from tokensmith.config import TokenConfig
from tokensmith.constants import DEFAULT_CACHE_TTL, DEFAULT_LEEWAY
from tokensmith.models.enums import Algorithm

from .support.constants import TEST_CLIENT_ID, TEST_DOMAIN, TEST_JWKS_URI


def test_defaults() -> None:
    config = TokenConfig(domain=TEST_DOMAIN)
    assert config.custom_domain is None
    assert config.client_id is None
    assert config.client_secret is None
    assert config.audience == []
    assert config.organization == []
    assert config.token_algorithm == Algorithm.RS256
    assert config.token_max_age is None
    assert config.token_leeway == DEFAULT_LEEWAY
    assert config.token_cache_ttl == DEFAULT_CACHE_TTL
    assert config.log_level == LogLevel.INFO
    assert config.log_profile == Profile.development
    assert config.jwks_uri == TEST_JWKS_URI
    assert config.accepted_audiences() == []


def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TOKENSMITH_DOMAIN", f"https://{TEST_DOMAIN}/")
    monkeypatch.setenv("TOKENSMITH_CLIENT_ID", TEST_CLIENT_ID)
    monkeypatch.setenv("TOKENSMITH_CLIENT_SECRET", "some-secret")
    monkeypatch.setenv("TOKENSMITH_AUDIENCE", '["api", "some-client-id"]')
    monkeypatch.setenv("TOKENSMITH_TOKEN_ALGORITHM", "HS256")
    monkeypatch.setenv("TOKENSMITH_TOKEN_MAX_AGE", "3600")
    monkeypatch.setenv("TOKENSMITH_LOG_LEVEL", "DEBUG")
    config = TokenConfig()

    assert config.domain == TEST_DOMAIN
    assert config.client_id == TEST_CLIENT_ID
    assert config.client_secret
    assert config.client_secret.get_secret_value() == "some-secret"
    assert "some-secret" not in repr(config)
    assert config.token_algorithm == Algorithm.HS256
    assert config.token_max_age == 3600
    assert config.log_level == LogLevel.DEBUG
    assert config.accepted_audiences() == ["api", TEST_CLIENT_ID]


def test_domains() -> None:
    config = TokenConfig(
        domain="https://tenant.example.com/",
        custom_domain="login.example.com/",
    )
    assert config.domain == "tenant.example.com"
    assert config.custom_domain == "login.example.com"
    assert config.format_domain() == "https://login.example.com"
    assert config.format_domain(tenant=True) == "https://tenant.example.com"
    assert config.jwks_uri == "https://login.example.com/.well-known/jwks.json"

    config = TokenConfig(
        domain=TEST_DOMAIN, token_jwks_uri="https://keys.example.com/jwks"
    )
    assert config.jwks_uri == "https://keys.example.com/jwks"

    with pytest.raises(ValidationError):
        TokenConfig(domain="https://")
    with pytest.raises(ValidationError):
        TokenConfig()


def test_invalid_values() -> None:
    with pytest.raises(ValidationError):
        TokenConfig(domain=TEST_DOMAIN, token_algorithm="none")
    with pytest.raises(ValidationError):
        TokenConfig(domain=TEST_DOMAIN, token_leeway=-1)
    with pytest.raises(ValidationError):
        TokenConfig(domain=TEST_DOMAIN, unknown_setting=True)


def test_configure_logging() -> None:
    config = TokenConfig(domain=TEST_DOMAIN, log_level=LogLevel.DEBUG)
    config.configure_logging()
