"""Tests for client assertion generation."""

from __future__ import annotations

import jwt
import pytest

from tokensmith.assertion import ClientAssertionGenerator
from tokensmith.constants import CLIENT_ASSERTION_LIFETIME
from tokensmith.exceptions import TokenGenerationError, TokenGenerationKind
from tokensmith.generator import TokenGenerator
from tokensmith.models.enums import Algorithm

from .support.constants import (
    TEST_CLIENT_ID,
    TEST_CLIENT_SECRET,
    TEST_DOMAIN,
    TEST_KEYPAIR,
)
from .support.tokens import now

AUDIENCE = f"https://{TEST_DOMAIN}/"


def test_create() -> None:
    public_key = TEST_KEYPAIR.public_key_as_pem().decode()
    for algorithm in (Algorithm.RS256, Algorithm.RS384):
        start = now()
        generator = ClientAssertionGenerator.create(
            AUDIENCE, TEST_CLIENT_ID, TEST_KEYPAIR, algorithm
        )
        assert isinstance(generator, TokenGenerator)
        assert generator.algorithm == algorithm

        claims = jwt.decode(
            generator.to_string(),
            public_key,
            algorithms=[algorithm.value],
            audience=AUDIENCE,
            issuer=TEST_CLIENT_ID,
        )
        assert claims["sub"] == TEST_CLIENT_ID
        assert start <= claims["iat"] <= now()
        assert claims["exp"] == claims["iat"] + CLIENT_ASSERTION_LIFETIME
        assert len(claims["jti"]) == 64


def test_unique_jti() -> None:
    pem = TEST_KEYPAIR.private_key_as_pem()
    jtis = {
        ClientAssertionGenerator.create(
            AUDIENCE, TEST_CLIENT_ID, pem
        ).claims["jti"]
        for _ in range(10)
    }
    assert len(jtis) == 10


def test_encrypted_key() -> None:
    encrypted = TEST_KEYPAIR.private_key_as_pem("some-passphrase")
    generator = ClientAssertionGenerator.create(
        AUDIENCE,
        TEST_CLIENT_ID,
        encrypted,
        passphrase="some-passphrase",
    )
    public_key = TEST_KEYPAIR.public_key_as_pem().decode()
    jwt.decode(
        str(generator), public_key, algorithms=["RS256"], audience=AUDIENCE
    )


def test_unsupported_algorithm() -> None:
    for algorithm in ("RS512", "HS256", "ES256"):
        with pytest.raises(TokenGenerationError) as excinfo:
            ClientAssertionGenerator.create(
                AUDIENCE, TEST_CLIENT_ID, TEST_CLIENT_SECRET, algorithm
            )
        assert excinfo.value.kind == TokenGenerationKind.unsupported_algorithm
        assert excinfo.value.details == {
            "algorithm": algorithm,
            "supported": ["RS256", "RS384"],
        }
