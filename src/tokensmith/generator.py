"""Create and sign a JWT."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Self, TypeAlias

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from .constants import DEFAULT_TOKEN_TYPE
from .exceptions import TokenGenerationError
from .keypair import RSAKeyPair, key_type_name
from .models.enums import Algorithm
from .types import Claims, Headers, JSONValue
from .util import base64url_encode, encode_segment

__all__ = ["SigningKey", "TokenGenerator"]

SigningKey: TypeAlias = str | bytes | RSAKeyPair | rsa.RSAPrivateKey
"""Key used to sign a token.

HMAC algorithms take the shared secret as a `str`. RSA algorithms take a
PEM-encoded private key (as `str` or `bytes`), an `RSAKeyPair`, or a private
key object from :py:mod:`cryptography`.
"""


def _supported() -> list[str]:
    return [a.value for a in Algorithm]


class TokenGenerator:
    """Build and sign a JWT from headers and claims.

    The algorithm and signing key are checked on construction, so an
    unusable key is reported before any token is produced.

    Parameters
    ----------
    signing_key
        Shared secret for HMAC algorithms or private key for RSA algorithms.
    algorithm
        Algorithm to sign the token with.
    claims
        Claims of the token.
    headers
        Additional headers. ``typ`` defaults to ``JWT`` and ``alg`` is
        always set to ``algorithm``.
    passphrase
        Passphrase for an encrypted PEM-encoded private key.

    Raises
    ------
    TokenGenerationError
        Raised if the algorithm is not supported or the key cannot be used
        with it.
    """

    @classmethod
    def create(
        cls,
        signing_key: SigningKey,
        algorithm: Algorithm | str = Algorithm.RS256,
        claims: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        passphrase: str | None = None,
    ) -> Self:
        """Create a token generator.

        See the class documentation for a description of the parameters.

        Returns
        -------
        TokenGenerator
            Generator ready to produce the signed token.

        Raises
        ------
        TokenGenerationError
            Raised if the algorithm is not supported or the key cannot be
            used with it.
        """
        return cls(signing_key, algorithm, claims, headers, passphrase)

    def __init__(
        self,
        signing_key: SigningKey,
        algorithm: Algorithm | str = Algorithm.RS256,
        claims: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        passphrase: str | None = None,
    ) -> None:
        try:
            self._algorithm = Algorithm(algorithm)
        except ValueError:
            raise TokenGenerationError.unsupported_algorithm(
                str(algorithm), _supported()
            ) from None
        self._claims = dict(claims or {})
        self._headers = {"typ": DEFAULT_TOKEN_TYPE, **(headers or {})}
        self._headers["alg"] = self._algorithm.value

        self._secret: bytes | None = None
        self._private_key: rsa.RSAPrivateKey | None = None
        if self._algorithm.is_hmac:
            if not isinstance(signing_key, str):
                raise TokenGenerationError.require_key_as_string(
                    self._algorithm
                )
            self._secret = signing_key.encode()
        else:
            self._private_key = self._load_private_key(signing_key, passphrase)

    @property
    def algorithm(self) -> Algorithm:
        """Algorithm used to sign the token."""
        return self._algorithm

    @property
    def claims(self) -> Claims:
        """Claims of the token."""
        return dict(self._claims)

    @property
    def headers(self) -> Headers:
        """Headers of the token, including ``typ`` and ``alg``."""
        return dict(self._headers)

    def to_dict(self) -> dict[str, JSONValue]:
        """Return the decoded headers and claims with the signature.

        The headers and claims are passed through JSON serialization, so the
        result contains exactly what a parser would decode from the token.

        Returns
        -------
        dict
            Dictionary with ``headers``, ``claims``, and ``signature`` keys.
            The signature is base64url-encoded.

        Raises
        ------
        TokenGenerationError
            Raised if a segment cannot be encoded or the data cannot be
            signed.
        """
        signature = self.to_list()[2]
        return {
            "headers": self._round_trip(self._headers, "headers"),
            "claims": self._round_trip(self._claims, "claims"),
            "signature": signature,
        }

    def to_list(self) -> list[str]:
        """Return the three encoded segments of the token.

        Returns
        -------
        list of str
            Encoded headers, claims, and signature.

        Raises
        ------
        TokenGenerationError
            Raised if a segment cannot be encoded or the data cannot be
            signed.
        """
        header_segment = self._encode(self._headers, "headers")
        claims_segment = self._encode(self._claims, "claims")
        payload = f"{header_segment}.{claims_segment}".encode()
        signature = base64url_encode(self._sign(payload))
        return [header_segment, claims_segment, signature]

    def to_string(self) -> str:
        """Return the encoded and signed token."""
        return ".".join(self.to_list())

    def __str__(self) -> str:
        return self.to_string()

    def _load_private_key(
        self, signing_key: SigningKey, passphrase: str | None
    ) -> rsa.RSAPrivateKey:
        """Convert the signing key to an RSA private key."""
        key: object = signing_key
        if isinstance(signing_key, RSAKeyPair):
            key = signing_key.private_key
        elif isinstance(signing_key, str | bytes):
            pem = signing_key
            if isinstance(pem, str):
                pem = pem.encode()
            password = passphrase.encode() if passphrase else None
            try:
                key = load_pem_private_key(pem, password=password)
            except (TypeError, ValueError, UnsupportedAlgorithm) as e:
                raise TokenGenerationError.unable_to_process_signing_key(
                    str(e)
                ) from e

        if isinstance(key, rsa.RSAPrivateKey):
            return key
        key_type = key_type_name(key)
        if key_type is None:
            found = type(signing_key).__name__
            raise TokenGenerationError.unidentifiable_key_type(found)
        raise TokenGenerationError.key_type_mismatch(key_type, self._algorithm)

    def _encode(self, data: Mapping[str, Any], segment: str) -> str:
        try:
            return encode_segment(data)
        except (TypeError, ValueError) as e:
            raise TokenGenerationError.unable_to_encode_segment(
                segment, str(e)
            ) from e

    def _round_trip(self, data: Mapping[str, Any], segment: str) -> Any:
        try:
            return json.loads(json.dumps(data, allow_nan=False))
        except (TypeError, ValueError) as e:
            raise TokenGenerationError.unable_to_encode_segment(
                segment, str(e)
            ) from e

    def _sign(self, payload: bytes) -> bytes:
        hash_algorithm = self._algorithm.hash_algorithm()
        try:
            if self._secret is not None:
                h = hmac.HMAC(self._secret, hash_algorithm)
                h.update(payload)
                return h.finalize()
            if self._private_key is None:
                raise TypeError("No private key loaded")
            return self._private_key.sign(
                payload, padding.PKCS1v15(), hash_algorithm
            )
        except (TypeError, ValueError, UnsupportedAlgorithm) as e:
            raise TokenGenerationError.unable_to_sign_data(str(e)) from e
