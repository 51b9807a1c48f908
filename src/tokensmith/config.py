"""Configuration for token handling.

All settings may be given as constructor arguments or through environment
variables with a ``TOKENSMITH_`` prefix, such as ``TOKENSMITH_DOMAIN``.
List settings read from the environment must be JSON lists.
"""

from __future__ import annotations

from urllib.parse import urlsplit

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from safir.logging import LogLevel, Profile, configure_logging

from .constants import (
    DEFAULT_CACHE_TTL,
    DEFAULT_LEEWAY,
    HTTP_TIMEOUT,
    JWKS_PATH,
)
from .models.enums import Algorithm

__all__ = ["TokenConfig"]


class TokenConfig(BaseSettings):
    """Settings for parsing, validating, and verifying tokens."""

    model_config = SettingsConfigDict(
        env_prefix="TOKENSMITH_", extra="forbid", populate_by_name=True
    )

    domain: str = Field(
        ...,
        title="Tenant domain",
        description=(
            "Domain of the identity provider tenant, such as"
            " ``example.us.auth0.com``. A scheme or trailing slash is"
            " removed."
        ),
    )

    custom_domain: str | None = Field(
        None,
        title="Custom domain",
        description=(
            "Custom domain configured for the tenant, if any. Tokens issued"
            " through the custom domain use it as their issuer."
        ),
    )

    client_id: str | None = Field(
        None,
        title="Client ID",
        description="Client ID of the application, accepted as an audience",
    )

    client_secret: SecretStr | None = Field(
        None,
        title="Client secret",
        description="Shared secret used to verify HMAC-signed tokens",
    )

    audience: list[str] = Field(
        [],
        title="Accepted audiences",
        description=(
            "Additional values of the ``aud`` claim to accept besides the"
            " client ID"
        ),
    )

    organization: list[str] = Field(
        [],
        title="Accepted organizations",
        description=(
            "If set, the ``org_id`` claim of tokens must be one of these"
            " organization IDs"
        ),
    )

    token_algorithm: Algorithm = Field(
        Algorithm.RS256,
        title="Token signing algorithm",
        description="Algorithm tokens are expected to be signed with",
    )

    token_jwks_uri: str | None = Field(
        None,
        title="Key set URI",
        description=(
            "URI of the key set used to verify RSA signatures. Defaults to"
            " ``/.well-known/jwks.json`` on the custom domain if set, or"
            " otherwise on the tenant domain."
        ),
    )

    token_max_age: int | None = Field(
        None,
        title="Maximum authentication age",
        description=(
            "If set, the ``auth_time`` claim must be no older than this many"
            " seconds"
        ),
        ge=0,
    )

    token_leeway: int = Field(
        DEFAULT_LEEWAY,
        title="Clock skew leeway",
        description="Seconds of clock skew to allow for time-based claims",
        ge=0,
    )

    token_cache_ttl: int = Field(
        DEFAULT_CACHE_TTL,
        title="Key set cache lifetime",
        description="How long in seconds to cache retrieved key sets",
        ge=0,
    )

    http_timeout: float = Field(
        HTTP_TIMEOUT,
        title="HTTP timeout",
        description="Timeout in seconds for retrieving key sets",
        gt=0,
    )

    log_level: LogLevel = Field(
        LogLevel.INFO,
        title="Logging level",
        description="Python logging level",
    )

    log_profile: Profile = Field(
        Profile.development,
        title="Logging profile",
        description=(
            "``production`` for JSON logs, ``development`` for human-readable"
            " logs"
        ),
    )

    @field_validator("domain", "custom_domain")
    @classmethod
    def _validate_domain(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if "://" in v:
            v = urlsplit(v).netloc
        v = v.rstrip("/")
        if not v:
            raise ValueError("domain must not be empty")
        return v

    @property
    def jwks_uri(self) -> str:
        """URI of the key set, with the default filled in."""
        if self.token_jwks_uri:
            return self.token_jwks_uri
        return self.format_domain() + JWKS_PATH

    def accepted_audiences(self) -> list[str]:
        """Return the audiences a token may be issued for.

        Returns
        -------
        list of str
            Configured audiences followed by the client ID, without
            duplicates.
        """
        audiences = list(self.audience)
        if self.client_id:
            audiences.append(self.client_id)
        return list(dict.fromkeys(audiences))

    def configure_logging(self) -> None:
        """Configure logging based on the configuration."""
        configure_logging(
            name="tokensmith",
            profile=self.log_profile,
            log_level=self.log_level,
        )

    def format_domain(self, *, tenant: bool = False) -> str:
        """Return the base URL of the identity provider.

        Parameters
        ----------
        tenant
            If `True`, use the tenant domain even if a custom domain is
            configured.

        Returns
        -------
        str
            URL with an ``https`` scheme and no trailing slash.
        """
        if self.custom_domain and not tenant:
            return f"https://{self.custom_domain}"
        return f"https://{self.domain}"
