"""Client assertions for private key JWT client authentication."""

from __future__ import annotations

from safir.datetime import current_datetime

from .constants import CLIENT_ASSERTION_LIFETIME
from .exceptions import TokenGenerationError
from .generator import SigningKey, TokenGenerator
from .models.enums import Algorithm
from .util import random_jti

__all__ = ["ClientAssertionGenerator"]

_ASSERTION_ALGORITHMS = (Algorithm.RS256, Algorithm.RS384)
"""Algorithms allowed for client assertions."""


class ClientAssertionGenerator:
    """Build client assertions signed with the client's private key."""

    @staticmethod
    def create(
        domain: str,
        client_id: str,
        signing_key: SigningKey,
        algorithm: Algorithm | str = Algorithm.RS256,
        passphrase: str | None = None,
    ) -> TokenGenerator:
        """Create a generator for a client assertion.

        The assertion is issued by and for the client, is addressed to the
        authorization server, and expires three minutes after it is issued.

        Parameters
        ----------
        domain
            Audience of the assertion, normally the base URL of the
            authorization server.
        client_id
            Client ID, used as both issuer and subject.
        signing_key
            Private key of the client.
        algorithm
            Signing algorithm. Only ``RS256`` and ``RS384`` are allowed.
        passphrase
            Passphrase for an encrypted PEM-encoded private key.

        Returns
        -------
        TokenGenerator
            Generator for the assertion. Convert it to a string to get the
            signed token.

        Raises
        ------
        TokenGenerationError
            Raised if the algorithm is not allowed or the key cannot be used.
        """
        if algorithm not in _ASSERTION_ALGORITHMS:
            supported = [a.value for a in _ASSERTION_ALGORITHMS]
            raise TokenGenerationError.unsupported_algorithm(
                str(algorithm), supported
            )

        now = int(current_datetime().timestamp())
        claims = {
            "iss": client_id,
            "sub": client_id,
            "aud": domain,
            "iat": now,
            "exp": now + CLIENT_ASSERTION_LIFETIME,
            "jti": random_jti(),
        }
        return TokenGenerator.create(
            signing_key, algorithm, claims, passphrase=passphrase
        )
