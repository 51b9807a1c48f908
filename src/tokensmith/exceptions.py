"""Exceptions for tokensmith.

Token failures use two tagged exception types, `InvalidTokenError` and
`TokenGenerationError`, each carrying a ``kind`` enum value and a ``details``
mapping with the values interpolated into the message. Callers should match
on ``kind`` rather than on the message text.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Any, Self

from safir.slack.blockkit import SlackException, SlackWebException

__all__ = [
    "FetchKeysError",
    "InvalidTokenError",
    "InvalidTokenKind",
    "TokenError",
    "TokenGenerationError",
    "TokenGenerationKind",
]


def _join(values: Iterable[Any]) -> str:
    return ", ".join(str(v) for v in values)


class TokenError(SlackException):
    """Base exception class for all token processing failures."""


class InvalidTokenKind(StrEnum):
    """Reasons why a token failed to parse, validate, or verify."""

    bad_separators = "bad_separators"
    malformed_segment = "malformed_segment"
    missing_alg_header = "missing_alg_header"
    missing_kid_header = "missing_kid_header"
    unexpected_signing_algorithm = "unexpected_signing_algorithm"
    unsupported_signing_algorithm = "unsupported_signing_algorithm"
    requires_client_secret = "requires_client_secret"
    requires_jwks_uri = "requires_jwks_uri"
    bad_signature = "bad_signature"
    bad_signature_missing_kid = "bad_signature_missing_kid"
    bad_signature_incompatible_algorithm = (
        "bad_signature_incompatible_algorithm"
    )
    missing_aud_claim = "missing_aud_claim"
    mismatched_aud_claim = "mismatched_aud_claim"
    missing_auth_time_claim = "missing_auth_time_claim"
    mismatched_auth_time_claim = "mismatched_auth_time_claim"
    missing_azp_claim = "missing_azp_claim"
    mismatched_azp_claim = "mismatched_azp_claim"
    missing_exp_claim = "missing_exp_claim"
    mismatched_exp_claim = "mismatched_exp_claim"
    missing_iat_claim = "missing_iat_claim"
    missing_iss_claim = "missing_iss_claim"
    mismatched_iss_claim = "mismatched_iss_claim"
    missing_nonce_claim = "missing_nonce_claim"
    mismatched_nonce_claim = "mismatched_nonce_claim"
    missing_org_id_claim = "missing_org_id_claim"
    mismatched_org_id_claim = "mismatched_org_id_claim"
    missing_sub_claim = "missing_sub_claim"
    missing_events_claim = "missing_events_claim"
    bad_event_claim = "bad_event_claim"
    missing_sub_and_sid_claims = "missing_sub_and_sid_claims"
    logout_token_nonce_present = "logout_token_nonce_present"


class InvalidTokenError(TokenError):
    """The token could not be parsed, failed validation, or failed to verify.

    Parameters
    ----------
    kind
        Discriminator for the failure.
    message
        Human-readable description, including any expected and found values.
    **details
        Structured values interpolated into the message.
    """

    def __init__(
        self, kind: InvalidTokenKind, message: str, **details: Any
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.details = details

    @classmethod
    def bad_separators(cls) -> Self:
        msg = "The JWT string must contain two dots"
        return cls(InvalidTokenKind.bad_separators, msg)

    @classmethod
    def malformed_segment(cls, segment: str, error: str) -> Self:
        msg = f"Unable to decode the {segment} segment of the JWT: {error}"
        return cls(
            InvalidTokenKind.malformed_segment,
            msg,
            segment=segment,
            error=error,
        )

    @classmethod
    def missing_alg_header(cls) -> Self:
        msg = "Provided token is missing an alg header"
        return cls(InvalidTokenKind.missing_alg_header, msg)

    @classmethod
    def missing_kid_header(cls) -> Self:
        msg = "Provided token is missing a kid header"
        return cls(InvalidTokenKind.missing_kid_header, msg)

    @classmethod
    def unexpected_signing_algorithm(cls, expected: str, found: str) -> Self:
        msg = (
            f'Expected token signed with "{expected}" algorithm, but token'
            f' uses "{found}"'
        )
        return cls(
            InvalidTokenKind.unexpected_signing_algorithm,
            msg,
            expected=expected,
            found=found,
        )

    @classmethod
    def unsupported_signing_algorithm(
        cls, algorithm: str, supported: Iterable[str]
    ) -> Self:
        supported = list(supported)
        msg = (
            f'Signature algorithm of "{algorithm}" is not supported. Expected'
            f" the token to be signed with one of: {_join(supported)}"
        )
        return cls(
            InvalidTokenKind.unsupported_signing_algorithm,
            msg,
            algorithm=algorithm,
            supported=supported,
        )

    @classmethod
    def requires_client_secret(cls, algorithm: str) -> Self:
        msg = (
            "Cannot verify signature: Client secret must be configured to"
            f" verify {algorithm} signatures"
        )
        return cls(
            InvalidTokenKind.requires_client_secret, msg, algorithm=algorithm
        )

    @classmethod
    def requires_jwks_uri(cls) -> Self:
        msg = "Cannot verify signature: JWKS uri was not configured properly"
        return cls(InvalidTokenKind.requires_jwks_uri, msg)

    @classmethod
    def bad_signature(cls, algorithm: str) -> Self:
        msg = f"Cannot verify {algorithm} signature"
        return cls(InvalidTokenKind.bad_signature, msg, algorithm=algorithm)

    @classmethod
    def bad_signature_missing_kid(cls, kid: str) -> Self:
        msg = (
            "Cannot verify signature: JWKS did not contain the key specified"
            f' by the token ("{kid}")'
        )
        return cls(InvalidTokenKind.bad_signature_missing_kid, msg, kid=kid)

    @classmethod
    def bad_signature_incompatible_algorithm(
        cls, algorithm: str, key_type: str
    ) -> Self:
        msg = (
            f"Cannot verify signature: Key of type {key_type} is incompatible"
            f" with the {algorithm} signing algorithm"
        )
        return cls(
            InvalidTokenKind.bad_signature_incompatible_algorithm,
            msg,
            algorithm=algorithm,
            key_type=key_type,
        )

    @classmethod
    def missing_aud_claim(cls) -> Self:
        msg = (
            "Audience (aud) claim must be a string or array of strings"
            " present in the token"
        )
        return cls(InvalidTokenKind.missing_aud_claim, msg)

    @classmethod
    def mismatched_aud_claim(
        cls, expected: Iterable[str], found: Iterable[str]
    ) -> Self:
        expected = list(expected)
        found = list(found)
        msg = (
            "Audience (aud) claim mismatch in the token; expected"
            f' "{_join(expected)}", found "{_join(found)}"'
        )
        return cls(
            InvalidTokenKind.mismatched_aud_claim,
            msg,
            expected=expected,
            found=found,
        )

    @classmethod
    def missing_auth_time_claim(cls) -> Self:
        msg = (
            "Authentication Time (auth_time) claim must be a number present"
            " in the token when Max Age is specified"
        )
        return cls(InvalidTokenKind.missing_auth_time_claim, msg)

    @classmethod
    def mismatched_auth_time_claim(cls, now: int, valid_until: int) -> Self:
        msg = (
            "Authentication Time (auth_time) claim in the token indicates"
            " that too much time has passed since the last end-user"
            f" authentication. Current time {now} is after last auth at"
            f" {valid_until}"
        )
        return cls(
            InvalidTokenKind.mismatched_auth_time_claim,
            msg,
            now=now,
            valid_until=valid_until,
        )

    @classmethod
    def missing_azp_claim(cls) -> Self:
        msg = (
            "Authorized Party (azp) claim must be a string present in the"
            " token when Audience (aud) claim has multiple values"
        )
        return cls(InvalidTokenKind.missing_azp_claim, msg)

    @classmethod
    def mismatched_azp_claim(cls, expected: Iterable[str], found: str) -> Self:
        expected = list(expected)
        msg = (
            "Authorized Party (azp) claim mismatch in the ID token; expected"
            f' "{_join(expected)}", found "{found}"'
        )
        return cls(
            InvalidTokenKind.mismatched_azp_claim,
            msg,
            expected=expected,
            found=found,
        )

    @classmethod
    def missing_exp_claim(cls) -> Self:
        msg = (
            "Expiration Time (exp) claim must be a number present in the token"
        )
        return cls(InvalidTokenKind.missing_exp_claim, msg)

    @classmethod
    def mismatched_exp_claim(cls, now: int, expires: int) -> Self:
        msg = (
            "Expiration Time (exp) claim error in the token; current time"
            f" {now} is after expiration time {expires}"
        )
        return cls(
            InvalidTokenKind.mismatched_exp_claim,
            msg,
            now=now,
            expires=expires,
        )

    @classmethod
    def missing_iat_claim(cls) -> Self:
        msg = "Issued At (iat) claim must be a number present in the token"
        return cls(InvalidTokenKind.missing_iat_claim, msg)

    @classmethod
    def missing_iss_claim(cls) -> Self:
        msg = "Issuer (iss) claim must be a string present in the token"
        return cls(InvalidTokenKind.missing_iss_claim, msg)

    @classmethod
    def mismatched_iss_claim(cls, expected: str, found: Any) -> Self:
        msg = (
            f'Issuer (iss) claim mismatch in the token; expected "{expected}",'
            f' found "{found}"'
        )
        return cls(
            InvalidTokenKind.mismatched_iss_claim,
            msg,
            expected=expected,
            found=found,
        )

    @classmethod
    def missing_nonce_claim(cls) -> Self:
        msg = "Nonce (nonce) claim must be a string present in the token"
        return cls(InvalidTokenKind.missing_nonce_claim, msg)

    @classmethod
    def mismatched_nonce_claim(cls, expected: str, found: Any) -> Self:
        msg = (
            "Nonce (nonce) claim mismatch in the token; expected"
            f' "{expected}", found "{found}"'
        )
        return cls(
            InvalidTokenKind.mismatched_nonce_claim,
            msg,
            expected=expected,
            found=found,
        )

    @classmethod
    def missing_org_id_claim(cls) -> Self:
        msg = (
            "Organization Id (org_id) claim must be a string present in the"
            " token"
        )
        return cls(InvalidTokenKind.missing_org_id_claim, msg)

    @classmethod
    def mismatched_org_id_claim(
        cls, expected: Iterable[str], found: Any
    ) -> Self:
        expected = list(expected)
        msg = (
            "Organization Id (org_id) claim value mismatch in the token;"
            f' expected "{_join(expected)}", found "{found}"'
        )
        return cls(
            InvalidTokenKind.mismatched_org_id_claim,
            msg,
            expected=expected,
            found=found,
        )

    @classmethod
    def missing_sub_claim(cls) -> Self:
        msg = "Subject (sub) claim must be a string present in the token"
        return cls(InvalidTokenKind.missing_sub_claim, msg)

    @classmethod
    def missing_events_claim(cls) -> Self:
        msg = "Events (events) claim must be an object present in the token"
        return cls(InvalidTokenKind.missing_events_claim, msg)

    @classmethod
    def bad_event_claim(cls, event: str, expected_type: str) -> Self:
        msg = (
            f'Events (events) claim must contain a value for "{event}" of'
            f" type {expected_type}"
        )
        return cls(
            InvalidTokenKind.bad_event_claim,
            msg,
            event=event,
            expected_type=expected_type,
        )

    @classmethod
    def missing_sub_and_sid_claims(cls) -> Self:
        msg = (
            "Subject (sub) or Session ID (sid) claim must be present in the"
            " logout token"
        )
        return cls(InvalidTokenKind.missing_sub_and_sid_claims, msg)

    @classmethod
    def logout_token_nonce_present(cls) -> Self:
        msg = "Nonce (nonce) claim must not be present in a logout token"
        return cls(InvalidTokenKind.logout_token_nonce_present, msg)


class TokenGenerationKind(StrEnum):
    """Reasons why a token could not be generated."""

    unsupported_algorithm = "unsupported_algorithm"
    require_key_as_string = "require_key_as_string"
    key_type_mismatch = "key_type_mismatch"
    unidentifiable_key_type = "unidentifiable_key_type"
    unable_to_process_signing_key = "unable_to_process_signing_key"
    unable_to_sign_data = "unable_to_sign_data"
    unable_to_encode_segment = "unable_to_encode_segment"


class TokenGenerationError(TokenError):
    """A token could not be generated or signed.

    Parameters
    ----------
    kind
        Discriminator for the failure.
    message
        Human-readable description of the failure.
    **details
        Structured values interpolated into the message.
    """

    def __init__(
        self, kind: TokenGenerationKind, message: str, **details: Any
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.details = details

    @classmethod
    def unsupported_algorithm(
        cls, algorithm: str, supported: Iterable[str]
    ) -> Self:
        supported = list(supported)
        msg = (
            f'Unsupported algorithm "{algorithm}". Supported algorithms are:'
            f" {_join(supported)}"
        )
        return cls(
            TokenGenerationKind.unsupported_algorithm,
            msg,
            algorithm=algorithm,
            supported=supported,
        )

    @classmethod
    def require_key_as_string(cls, algorithm: str) -> Self:
        msg = f"{algorithm} algorithm requires a key in string format"
        return cls(
            TokenGenerationKind.require_key_as_string,
            msg,
            algorithm=algorithm,
        )

    @classmethod
    def key_type_mismatch(cls, key_type: str, algorithm: str) -> Self:
        msg = (
            f'Key type "{key_type}" is not supported for the {algorithm}'
            " algorithm"
        )
        return cls(
            TokenGenerationKind.key_type_mismatch,
            msg,
            key_type=key_type,
            algorithm=algorithm,
        )

    @classmethod
    def unidentifiable_key_type(cls, found: str) -> Self:
        msg = f"Key type could not be determined from {found}"
        return cls(
            TokenGenerationKind.unidentifiable_key_type, msg, found=found
        )

    @classmethod
    def unable_to_process_signing_key(cls, error: str) -> Self:
        msg = (
            "An exception occurred while attempting to process the"
            f" configured signing key: {error}"
        )
        return cls(
            TokenGenerationKind.unable_to_process_signing_key,
            msg,
            error=error,
        )

    @classmethod
    def unable_to_sign_data(cls, error: str) -> Self:
        msg = (
            "An exception occurred while attempting to produce signature"
            f" during token generation: {error}"
        )
        return cls(TokenGenerationKind.unable_to_sign_data, msg, error=error)

    @classmethod
    def unable_to_encode_segment(cls, segment: str, error: str) -> Self:
        msg = (
            "An exception occurred while attempting to encode segment"
            f' "{segment}" during token generation: {error}'
        )
        return cls(
            TokenGenerationKind.unable_to_encode_segment,
            msg,
            segment=segment,
            error=error,
        )


class FetchKeysError(SlackWebException, TokenError):
    """Cannot retrieve the key set from its URI."""
