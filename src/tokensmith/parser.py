"""Parse an encoded JWT."""

from __future__ import annotations

from typing import Self

import httpx
from structlog.stdlib import BoundLogger

from .cache import KeySetCache
from .constants import DEFAULT_TOKEN_TYPE
from .exceptions import InvalidTokenError
from .models.enums import Algorithm
from .types import Claims, Headers, JSONValue
from .util import base64url_decode, decode_json_segment
from .validator import TokenValidator
from .verifier import TokenVerifier

__all__ = ["TokenParser"]


class TokenParser:
    """Split a JWT into its headers, claims, and signature.

    The token is parsed eagerly, so constructing a parser fails immediately
    if the token is malformed. Parsing does not check the signature or any
    claims; use `verify` and `validate` for that.

    Parameters
    ----------
    token
        Encoded JWT.
    domain
        Default host of the key set URI when verifying tokens with an
        asymmetric signature.

    Raises
    ------
    InvalidTokenError
        Raised if the token does not have three segments or the segments
        cannot be decoded.
    """

    @classmethod
    def parse(cls, token: str, *, domain: str | None = None) -> Self:
        """Parse an encoded JWT.

        Parameters
        ----------
        token
            Encoded JWT.
        domain
            Default host of the key set URI when verifying tokens with an
            asymmetric signature.

        Returns
        -------
        TokenParser
            The parsed token.

        Raises
        ------
        InvalidTokenError
            Raised if the token does not have three segments or the segments
            cannot be decoded.
        """
        return cls(token, domain=domain)

    def __init__(self, token: str, *, domain: str | None = None) -> None:
        self._domain = domain

        parts = token.split(".")
        if len(parts) != 3:
            raise InvalidTokenError.bad_separators()
        headers = decode_json_segment(parts[0], "header")
        claims = decode_json_segment(parts[1], "claims")
        try:
            signature = base64url_decode(parts[2])
        except ValueError as e:
            msg = str(e)
            raise InvalidTokenError.malformed_segment("signature", msg) from e

        if "typ" not in headers:
            headers["typ"] = DEFAULT_TOKEN_TYPE

        self._raw = token
        self._parts = parts
        self._headers: Headers = headers
        self._claims: Claims = claims
        self._signature = signature

    @property
    def claims(self) -> Claims:
        """Decoded claims of the token."""
        return dict(self._claims)

    @property
    def headers(self) -> Headers:
        """Decoded headers of the token."""
        return dict(self._headers)

    @property
    def parts(self) -> list[str]:
        """The three encoded segments of the token."""
        return list(self._parts)

    @property
    def payload(self) -> str:
        """The signed portion of the token (encoded headers and claims)."""
        return ".".join(self._parts[:2])

    @property
    def raw(self) -> str:
        """The token exactly as it was provided."""
        return self._raw

    @property
    def signature(self) -> bytes:
        """The decoded signature."""
        return self._signature

    def get_claim(self, key: str) -> JSONValue:
        """Return the value of a claim, or `None` if it is not present."""
        return self._claims.get(key)

    def get_header(self, key: str) -> str | None:
        """Return a header as a string, or `None` if it is not present."""
        value = self._headers.get(key)
        return None if value is None else str(value)

    def has_claim(self, key: str) -> bool:
        """Return whether a claim is present with a non-null value."""
        return self.get_claim(key) is not None

    def has_header(self, key: str) -> bool:
        """Return whether a header is present with a non-null value."""
        return self.get_header(key) is not None

    def validate(self) -> TokenValidator:
        """Return a validator for the claims of this token."""
        return TokenValidator(self._claims)

    def verify(
        self,
        algorithm: Algorithm | str | None = Algorithm.RS256,
        jwks_uri: str | None = None,
        client_secret: str | None = None,
        cache_ttl: int | None = None,
        cache: KeySetCache | None = None,
        *,
        http_client: httpx.Client | None = None,
        logger: BoundLogger | None = None,
    ) -> Self:
        """Verify the signature of the token.

        Parameters
        ----------
        algorithm
            Algorithm the token must be signed with. Pass `None` to accept
            any supported algorithm.
        jwks_uri
            URI of the key set, required for tokens with an RSA signature.
        client_secret
            Shared secret, required for tokens with an HMAC signature.
        cache_ttl
            Lifetime in seconds of cached key sets.
        cache
            Cache for retrieved key sets.
        http_client
            Client used to retrieve the key set.
        logger
            Logger for any log messages.

        Returns
        -------
        TokenParser
            The parser itself, to allow chaining.

        Raises
        ------
        InvalidTokenError
            Raised if the signature could not be verified.
        """
        TokenVerifier(
            self.payload,
            self._signature,
            self._headers,
            algorithm=algorithm,
            jwks_uri=jwks_uri,
            client_secret=client_secret,
            cache_ttl=cache_ttl,
            cache=cache,
            domain=self._domain,
            http_client=http_client,
            logger=logger,
        )
        return self
