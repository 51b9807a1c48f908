"""Enums used in tokensmith models."""

from __future__ import annotations

from enum import StrEnum

from cryptography.hazmat.primitives import hashes

__all__ = [
    "Algorithm",
    "KeyFamily",
    "TokenType",
]


class KeyFamily(StrEnum):
    """Family of keys used by a signing algorithm."""

    hmac = "HMAC"
    rsa = "RSA"


class Algorithm(StrEnum):
    """A supported JWS signing algorithm."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"

    @property
    def family(self) -> KeyFamily:
        """Family of keys this algorithm signs with."""
        return _FAMILIES[self]

    @property
    def is_hmac(self) -> bool:
        """Whether this is a symmetric (HMAC) algorithm."""
        return self.family == KeyFamily.hmac

    @property
    def is_rsa(self) -> bool:
        """Whether this is an asymmetric (RSA) algorithm."""
        return self.family == KeyFamily.rsa

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        """Return a new instance of the digest used by this algorithm."""
        return _DIGESTS[self]()


_FAMILIES: dict[Algorithm, KeyFamily] = {
    Algorithm.HS256: KeyFamily.hmac,
    Algorithm.HS384: KeyFamily.hmac,
    Algorithm.HS512: KeyFamily.hmac,
    Algorithm.RS256: KeyFamily.rsa,
    Algorithm.RS384: KeyFamily.rsa,
    Algorithm.RS512: KeyFamily.rsa,
}

_DIGESTS: dict[Algorithm, type[hashes.HashAlgorithm]] = {
    Algorithm.HS256: hashes.SHA256,
    Algorithm.HS384: hashes.SHA384,
    Algorithm.HS512: hashes.SHA512,
    Algorithm.RS256: hashes.SHA256,
    Algorithm.RS384: hashes.SHA384,
    Algorithm.RS512: hashes.SHA512,
}


class TokenType(StrEnum):
    """Type of token, which controls which claims are validated."""

    id_token = "id_token"
    access_token = "access_token"
    logout_token = "logout_token"
