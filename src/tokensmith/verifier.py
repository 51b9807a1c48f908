"""Verify the signature of a JWT."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Self
from urllib.parse import urlsplit, urlunsplit

import httpx
import structlog
from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from structlog.stdlib import BoundLogger

from .cache import KeySetCache
from .constants import DEFAULT_CACHE_TTL, HTTP_TIMEOUT, JWKS_PATH
from .exceptions import FetchKeysError, InvalidTokenError
from .keypair import key_type_name
from .models.enums import Algorithm
from .models.jwks import JWKS
from .types import JSONValue, KeySet
from .util import hash_uri

__all__ = ["TokenVerifier"]


def _host_of(domain: str) -> str:
    """Extract the host (and port) from a domain that may be a URL."""
    if "://" not in domain:
        domain = "//" + domain
    return urlsplit(domain).netloc


def _wrap_certificate(x5c: str) -> bytes:
    """Convert an ``x5c`` chain entry to a PEM-encoded certificate."""
    body = "".join(x5c.split())
    lines = [body[i : i + 64] for i in range(0, len(body), 64)]
    pem = "\n".join(
        ["-----BEGIN CERTIFICATE-----", *lines, "-----END CERTIFICATE-----"]
    )
    return (pem + "\n").encode()


class TokenVerifier:
    """Verify the signature of a JWT.

    Verification happens during construction, so creating a verifier for a
    token with an invalid signature raises an exception. HMAC signatures are
    checked against a shared client secret. RSA signatures are checked
    against the public key in the key set published at ``jwks_uri`` whose
    key ID matches the ``kid`` header of the token.

    Parameters
    ----------
    payload
        The signed portion of the token: the encoded header and claims
        segments joined with a period.
    signature
        Decoded signature.
    headers
        Decoded headers of the token.
    algorithm
        Algorithm the token must be signed with, or `None` to accept any
        supported algorithm.
    jwks_uri
        URI of the key set. A missing scheme defaults to ``https``, a
        missing host to ``domain``, and a missing path to
        ``/.well-known/jwks.json``.
    client_secret
        Shared secret for HMAC signatures.
    cache_ttl
        Lifetime in seconds of cached key sets.
    cache
        Cache for retrieved key sets. If not given, the key set is retrieved
        for every verification.
    domain
        Default host for ``jwks_uri``.
    http_client
        Client used to retrieve the key set. If not given, a client is
        created for each retrieval.
    logger
        Logger for any log messages.

    Raises
    ------
    InvalidTokenError
        Raised if the signature could not be verified.
    """

    def __init__(
        self,
        payload: str,
        signature: bytes,
        headers: Mapping[str, JSONValue],
        *,
        algorithm: Algorithm | str | None = None,
        jwks_uri: str | None = None,
        client_secret: str | None = None,
        cache_ttl: int | None = None,
        cache: KeySetCache | None = None,
        domain: str | None = None,
        http_client: httpx.Client | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._payload = payload
        self._signature = signature
        self._headers = dict(headers)
        self._algorithm = str(algorithm) if algorithm else None
        self._jwks_uri = jwks_uri
        self._client_secret = client_secret
        self._cache_ttl = DEFAULT_CACHE_TTL if cache_ttl is None else cache_ttl
        self._cache = cache
        self._domain = domain
        self._http_client = http_client
        self._logger = logger or structlog.get_logger("tokensmith")
        self.verify()

    def verify(self) -> Self:
        """Verify the signature.

        Returns
        -------
        TokenVerifier
            The verifier itself, to allow chaining.

        Raises
        ------
        InvalidTokenError
            Raised if the signature could not be verified.
        """
        alg = self._headers.get("alg")
        if alg is None:
            raise InvalidTokenError.missing_alg_header()
        alg = str(alg)
        if self._algorithm and self._algorithm != alg:
            raise InvalidTokenError.unexpected_signing_algorithm(
                self._algorithm, alg
            )
        try:
            algorithm = Algorithm(alg)
        except ValueError:
            supported = [a.value for a in Algorithm]
            raise InvalidTokenError.unsupported_signing_algorithm(
                alg, supported
            ) from None

        if algorithm.is_hmac:
            self._verify_hmac(algorithm)
        else:
            self._verify_rsa(algorithm)
        return self

    def get_key(
        self, kid: str, algorithm: Algorithm = Algorithm.RS256
    ) -> rsa.RSAPublicKey:
        """Get the public key for a key ID.

        Parameters
        ----------
        kid
            Key ID from the token header.
        algorithm
            Algorithm the key will be used with, for error reporting.

        Returns
        -------
        cryptography.hazmat.primitives.asymmetric.rsa.RSAPublicKey
            Public key from the first certificate of the key's chain.

        Raises
        ------
        InvalidTokenError
            Raised if the key set URI is not configured, the key set does not
            contain the key, the certificate cannot be loaded, or the key is
            not an RSA key.
        """
        keys = self.get_key_set(kid)
        if kid not in keys:
            raise InvalidTokenError.bad_signature_missing_kid(kid)

        try:
            pem = _wrap_certificate(keys[kid]["x5c"][0])
            certificate = x509.load_pem_x509_certificate(pem)
            public_key = certificate.public_key()
        except UnsupportedAlgorithm as e:
            raise InvalidTokenError.bad_signature_incompatible_algorithm(
                algorithm, "unknown"
            ) from e
        except (
            AttributeError, KeyError, IndexError, TypeError, ValueError
        ) as e:
            self._logger.debug("Cannot load key from key set", kid=kid)
            raise InvalidTokenError.bad_signature(algorithm) from e

        if not isinstance(public_key, rsa.RSAPublicKey):
            key_type = key_type_name(public_key) or "unknown"
            raise InvalidTokenError.bad_signature_incompatible_algorithm(
                algorithm, key_type
            )
        return public_key

    def get_key_set(self, kid: str | None = None) -> KeySet:
        """Get the key set, from the cache if possible.

        A cached key set that lacks the requested key ID is treated as a
        cache miss and the whole key set is retrieved again.

        Parameters
        ----------
        kid
            Key ID that the key set must contain to be used from the cache.

        Returns
        -------
        dict of dict
            Key records indexed by key ID. This will be empty if the key set
            could not be retrieved.

        Raises
        ------
        InvalidTokenError
            Raised if no key set URI is configured or it has no host and no
            default domain is available.
        """
        if not self._jwks_uri:
            raise InvalidTokenError.requires_jwks_uri()
        cache_key = hash_uri(self._jwks_uri)

        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None and (kid is None or kid in cached):
                self._logger.debug(
                    "Using cached key set", jwks_uri=self._jwks_uri
                )
                return cached

        url = self._build_jwks_url(self._jwks_uri)
        keys = self._fetch_key_set(url)
        if keys and self._cache is not None:
            self._cache.set(cache_key, keys, self._cache_ttl)
        return keys

    def _build_jwks_url(self, jwks_uri: str) -> str:
        """Fill in the defaults for any missing parts of the key set URI."""
        if "://" not in jwks_uri and not jwks_uri.startswith("/"):
            jwks_uri = "//" + jwks_uri
        try:
            url = urlsplit(jwks_uri)
            host = url.netloc
            if not host and self._domain:
                host = _host_of(self._domain)
        except ValueError as e:
            raise InvalidTokenError.requires_jwks_uri() from e
        if not host:
            raise InvalidTokenError.requires_jwks_uri()
        scheme = url.scheme or "https"
        path = url.path or JWKS_PATH
        return urlunsplit((scheme, host, path, url.query, ""))

    def _fetch_key_set(self, url: str) -> KeySet:
        """Retrieve and index the key set.

        Failures are logged and result in an empty key set, which will cause
        verification to fail because the key is missing.
        """
        self._logger.debug("Retrieving key set", url=url)
        try:
            jwks = self._get_jwks(url)
        except FetchKeysError as e:
            self._logger.warning(
                "Unable to retrieve key set", url=url, error=str(e)
            )
            return {}
        return jwks.signing_keys()

    def _get_jwks(self, url: str) -> JWKS:
        """Retrieve the key set document.

        Raises
        ------
        FetchKeysError
            Raised if the request fails or the response is not a key set.
        """
        try:
            if self._http_client:
                r = self._http_client.get(url)
            else:
                with httpx.Client(timeout=HTTP_TIMEOUT) as client:
                    r = client.get(url)
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchKeysError.from_exception(e) from e

        try:
            return JWKS.model_validate(r.json())
        except ValueError as e:
            msg = f"No valid keys property in JWKS metadata for {url}"
            raise FetchKeysError(msg) from e

    def _verify_hmac(self, algorithm: Algorithm) -> None:
        if not self._client_secret:
            raise InvalidTokenError.requires_client_secret(algorithm)
        key = self._client_secret.encode()
        h = hmac.HMAC(key, algorithm.hash_algorithm())
        h.update(self._payload.encode())
        try:
            h.verify(self._signature)
        except InvalidSignature as e:
            raise InvalidTokenError.bad_signature(algorithm) from e

    def _verify_rsa(self, algorithm: Algorithm) -> None:
        kid = self._headers.get("kid")
        if kid is None:
            raise InvalidTokenError.missing_kid_header()
        public_key = self.get_key(str(kid), algorithm)
        try:
            public_key.verify(
                self._signature,
                self._payload.encode(),
                padding.PKCS1v15(),
                algorithm.hash_algorithm(),
            )
        except InvalidSignature as e:
            raise InvalidTokenError.bad_signature(algorithm) from e
