"""High-level handling of tokens issued by the identity provider."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Self

import httpx
import structlog
from structlog.stdlib import BoundLogger

from .cache import KeySetCache
from .config import TokenConfig
from .constants import BACKCHANNEL_LOGOUT_EVENT
from .exceptions import InvalidTokenError
from .models.enums import Algorithm, TokenType
from .parser import TokenParser
from .types import Claims, JSONValue

__all__ = ["Token"]


def _is_digits(value: JSONValue) -> bool:
    return isinstance(value, str) and value.isascii() and value.isdigit()


def _as_int(value: JSONValue) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _is_digits(value):
        return int(value)
    return None


def _as_str(value: JSONValue) -> str | None:
    return value if isinstance(value, str) else None


class Token:
    """A token issued by the identity provider.

    Wraps `~tokensmith.parser.TokenParser` and fills in validation and
    verification parameters from the configuration. The token is parsed the
    first time it is used.

    Parameters
    ----------
    config
        Token configuration.
    jwt
        Encoded token.
    token_type
        Type of the token, which determines which claims are required.
    cache
        Cache for retrieved key sets, used unless another one is passed to
        `verify`.
    http_client
        Client used to retrieve key sets.
    logger
        Logger for any log messages.
    """

    def __init__(
        self,
        config: TokenConfig,
        jwt: str,
        token_type: TokenType = TokenType.id_token,
        *,
        cache: KeySetCache | None = None,
        http_client: httpx.Client | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._config = config
        self._jwt = jwt
        self._token_type = token_type
        self._cache = cache
        self._http_client = http_client
        self._logger = logger or structlog.get_logger("tokensmith")
        self._parser: TokenParser | None = None

    @property
    def audience(self) -> list[str] | None:
        """Audiences of the token, normalized to a list of strings."""
        claim = self._get_parser().get_claim("aud")
        if isinstance(claim, str | int) and not isinstance(claim, bool):
            claim = [claim]
        if not isinstance(claim, list):
            return None
        audience = []
        for value in claim:
            if isinstance(value, str) and _is_digits(value):
                value = int(value)
            if isinstance(value, str | int) and not isinstance(value, bool):
                audience.append(str(value))
        return audience

    @property
    def authorized_party(self) -> str | None:
        return _as_str(self._get_parser().get_claim("azp"))

    @property
    def auth_time(self) -> int | None:
        return _as_int(self._get_parser().get_claim("auth_time"))

    @property
    def events(self) -> dict[str, JSONValue] | None:
        claim = self._get_parser().get_claim("events")
        return claim if isinstance(claim, dict) else None

    @property
    def expiration(self) -> int | None:
        return _as_int(self._get_parser().get_claim("exp"))

    @property
    def identifier(self) -> str | None:
        """Session ID (``sid`` claim) of the token."""
        return _as_str(self._get_parser().get_claim("sid"))

    @property
    def issued(self) -> int | None:
        return _as_int(self._get_parser().get_claim("iat"))

    @property
    def issuer(self) -> str | None:
        return _as_str(self._get_parser().get_claim("iss"))

    @property
    def nonce(self) -> str | None:
        return _as_str(self._get_parser().get_claim("nonce"))

    @property
    def organization(self) -> str | None:
        """Organization ID of the token, or else its organization name."""
        return self.organization_id or self.organization_name

    @property
    def organization_id(self) -> str | None:
        return _as_str(self._get_parser().get_claim("org_id"))

    @property
    def organization_name(self) -> str | None:
        return _as_str(self._get_parser().get_claim("org_name"))

    @property
    def subject(self) -> str | None:
        return _as_str(self._get_parser().get_claim("sub"))

    @property
    def token_type(self) -> TokenType:
        """Type of the token."""
        return self._token_type

    def parse(self) -> Self:
        """Parse the token if that has not already been done.

        Raises
        ------
        InvalidTokenError
            Raised if the token is malformed.
        """
        self._get_parser()
        return self

    def to_dict(self) -> Claims:
        """Return the claims of the token."""
        return self._get_parser().claims

    def to_json(self) -> str:
        """Return the claims of the token as indented JSON."""
        return json.dumps(self.to_dict(), indent=4)

    def validate(
        self,
        issuer: str | None = None,
        audience: Iterable[str] | None = None,
        organization: Iterable[str] | None = None,
        nonce: str | None = None,
        max_age: int | None = None,
        leeway: int | None = None,
        now: int | None = None,
    ) -> Self:
        """Validate the claims of the token.

        Any parameter that is not given is taken from the configuration.
        The client ID is always an acceptable audience. If the issuer does
        not match and a custom domain is in use, the tenant domain is also
        accepted as issuer.

        ID tokens must also have subject and issued-at claims, and an
        authorized party if they have several audiences. Logout tokens must
        not have a nonce, must carry the back-channel logout event, and must
        identify either a subject or a session.

        Parameters
        ----------
        issuer
            Expected issuer.
        audience
            Acceptable audiences.
        organization
            Acceptable organization IDs. Not checked if empty.
        nonce
            Expected nonce. Not checked if not given.
        max_age
            Maximum time in seconds since authentication. Not checked if not
            given.
        leeway
            Clock skew to allow, in seconds.
        now
            Current time in seconds since epoch, for testing.

        Returns
        -------
        Token
            The token itself, to allow chaining.

        Raises
        ------
        InvalidTokenError
            Raised if the token is malformed or a claim is not valid.
        """
        config = self._config
        tenant_issuer = config.format_domain(tenant=True) + "/"
        if issuer is None:
            issuer = config.format_domain() + "/"
        if audience is None:
            audiences = config.accepted_audiences()
        else:
            audiences = list(audience)
            if config.client_id:
                audiences.append(config.client_id)
            audiences = list(dict.fromkeys(audiences))
        if organization is None:
            organization = config.organization
        organization = list(organization)
        if max_age is None:
            max_age = config.token_max_age
        if leeway is None:
            leeway = config.token_leeway

        parser = self._get_parser()
        validator = parser.validate()

        if self._token_type == TokenType.logout_token:
            if parser.has_claim("nonce"):
                raise InvalidTokenError.logout_token_nonce_present()
            if not parser.has_claim("events"):
                raise InvalidTokenError.missing_events_claim()

        try:
            validator.issuer(issuer)
        except InvalidTokenError:
            if tenant_issuer == issuer:
                raise
            validator.issuer(tenant_issuer)

        validator.audience(audiences).expiration(leeway, now)

        if self._token_type == TokenType.id_token:
            validator.subject().issued().authorized_party(audiences)
        elif self._token_type == TokenType.logout_token:
            validator.issued().authorized_party(audiences)
            validator.events([BACKCHANNEL_LOGOUT_EVENT])
            if self.subject is None and self.identifier is None:
                raise InvalidTokenError.missing_sub_and_sid_claims()

        if nonce is not None:
            validator.nonce(nonce)
        if max_age is not None:
            validator.auth_time(max_age, leeway, now)
        if organization:
            validator.organization(organization)

        self._logger.debug(
            "Validated token claims", token_type=self._token_type.value
        )
        return self

    def verify(
        self,
        algorithm: Algorithm | str | None = None,
        jwks_uri: str | None = None,
        client_secret: str | None = None,
        cache_ttl: int | None = None,
        cache: KeySetCache | None = None,
    ) -> Self:
        """Verify the signature of the token.

        Any parameter that is not given is taken from the configuration.

        Parameters
        ----------
        algorithm
            Algorithm the token must be signed with.
        jwks_uri
            URI of the key set for RSA signatures.
        client_secret
            Shared secret for HMAC signatures.
        cache_ttl
            Lifetime in seconds of cached key sets.
        cache
            Cache for retrieved key sets.

        Returns
        -------
        Token
            The token itself, to allow chaining.

        Raises
        ------
        InvalidTokenError
            Raised if the token is malformed or the signature is not valid.
        """
        config = self._config
        if algorithm is None:
            algorithm = config.token_algorithm
        if jwks_uri is None:
            jwks_uri = config.jwks_uri
        if client_secret is None and config.client_secret:
            client_secret = config.client_secret.get_secret_value()
        if cache_ttl is None:
            cache_ttl = config.token_cache_ttl
        if cache is None:
            cache = self._cache

        parser = self._get_parser()
        args = (algorithm, jwks_uri, client_secret, cache_ttl, cache)
        if self._http_client:
            parser.verify(
                *args, http_client=self._http_client, logger=self._logger
            )
        else:
            with httpx.Client(timeout=config.http_timeout) as client:
                parser.verify(*args, http_client=client, logger=self._logger)
        self._logger.debug(
            "Verified token signature", algorithm=str(algorithm)
        )
        return self

    def _get_parser(self) -> TokenParser:
        if self._parser is None:
            self._parser = TokenParser(self._jwt, domain=self._config.domain)
        return self._parser

