"""Helpers for creating test tokens."""

from __future__ import annotations

from typing import Any

from safir.datetime import current_datetime

from tokensmith.generator import TokenGenerator
from tokensmith.models.enums import Algorithm

from .constants import (
    TEST_CLIENT_ID,
    TEST_CLIENT_SECRET,
    TEST_DOMAIN,
    TEST_KEYPAIR,
    TEST_KID,
)

__all__ = [
    "create_hmac_token",
    "create_rsa_token",
    "id_token_claims",
    "now",
]


def now() -> int:
    """Return the current time in seconds since epoch."""
    return int(current_datetime().timestamp())


def id_token_claims(**claims: Any) -> dict[str, Any]:
    """Build the claims of a valid ID token for the test tenant.

    Parameters
    ----------
    **claims
        Claims to add or override. A value of `None` removes the claim.

    Returns
    -------
    dict of Any
        Token claims.
    """
    current = now()
    result: dict[str, Any] = {
        "iss": f"https://{TEST_DOMAIN}/",
        "sub": "auth0|some-user",
        "aud": TEST_CLIENT_ID,
        "iat": current - 10,
        "exp": current + 3600,
    }
    result.update(claims)
    return {k: v for k, v in result.items() if v is not None}


def create_hmac_token(
    claims: dict[str, Any] | None = None,
    *,
    algorithm: Algorithm = Algorithm.HS256,
    secret: str = TEST_CLIENT_SECRET,
) -> str:
    """Create a token signed with a shared secret."""
    if claims is None:
        claims = id_token_claims()
    return TokenGenerator.create(secret, algorithm, claims).to_string()


def create_rsa_token(
    claims: dict[str, Any] | None = None,
    *,
    algorithm: Algorithm = Algorithm.RS256,
    kid: str | None = TEST_KID,
) -> str:
    """Create a token signed with the test key pair."""
    if claims is None:
        claims = id_token_claims()
    headers = {"kid": kid} if kid else {}
    generator = TokenGenerator.create(
        TEST_KEYPAIR, algorithm, claims, headers
    )
    return generator.to_string()
