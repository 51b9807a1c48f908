"""Validation of JWT claims."""

from __future__ import annotations

import math
from collections.abc import Collection, Iterable, Mapping
from typing import Any, Self

from safir.datetime import current_datetime

from .constants import DEFAULT_LEEWAY
from .exceptions import InvalidTokenError
from .types import JSONValue

__all__ = ["TokenValidator"]


class TokenValidator:
    """Check individual claims of a token.

    Each check inspects exactly one claim and either returns the validator,
    so that checks can be chained, or raises `InvalidTokenError` for the
    first failure. Claims with a `None` value are treated as absent.

    Parameters
    ----------
    claims
        Decoded claims of the token. The mapping is copied on construction.
    """

    def __init__(self, claims: Mapping[str, JSONValue]) -> None:
        self._claims = dict(claims)

    def audience(self, expected: Iterable[str]) -> Self:
        """Check that the token was issued for one of the expected audiences.

        Parameters
        ----------
        expected
            Acceptable audiences. At least one must match a value of the
            ``aud`` claim, which may be a string or a list of strings.

        Raises
        ------
        InvalidTokenError
            Raised if the claim is missing or no value matches.
        """
        claim = self._get_claim("aud")
        if claim is None:
            raise InvalidTokenError.missing_aud_claim()
        audience = claim if isinstance(claim, list) else [claim]
        expected = list(expected)
        if any(a in expected for a in audience):
            return self
        raise InvalidTokenError.mismatched_aud_claim(expected, audience)

    def auth_time(
        self,
        max_age: int,
        leeway: int = DEFAULT_LEEWAY,
        now: int | None = None,
    ) -> Self:
        """Check that the user authenticated recently enough.

        Parameters
        ----------
        max_age
            Maximum allowable time in seconds since authentication.
        leeway
            Clock skew to allow, in seconds.
        now
            Current time in seconds since epoch. Defaults to the current
            time.

        Raises
        ------
        InvalidTokenError
            Raised if the ``auth_time`` claim is missing or too old.
        """
        claim = self._get_claim("auth_time")
        if claim is None:
            raise InvalidTokenError.missing_auth_time_claim()
        now = self._now(now)
        valid_until = int(self._as_number(claim)) + max_age + leeway
        if now > valid_until:
            raise InvalidTokenError.mismatched_auth_time_claim(
                now, valid_until
            )
        return self

    def authorized_party(self, expected: Collection[str]) -> Self:
        """Check the authorized party of a token with several audiences.

        The ``azp`` claim is only required when the ``aud`` claim is a list.
        A token with a single audience passes without further checks.

        Parameters
        ----------
        expected
            Acceptable authorized parties. For a mapping, its keys are
            acceptable.

        Raises
        ------
        InvalidTokenError
            Raised if the ``aud`` claim is missing, or if it is a list and
            the ``azp`` claim is missing or not acceptable.
        """
        audience = self._get_claim("aud")
        if audience is None:
            raise InvalidTokenError.missing_aud_claim()
        if isinstance(audience, list):
            azp = self._get_claim("azp")
            if azp is None:
                raise InvalidTokenError.missing_azp_claim()
            if not isinstance(azp, str) or azp not in expected:
                raise InvalidTokenError.mismatched_azp_claim(expected, azp)
        return self

    def events(self, expected: Iterable[str]) -> Self:
        """Check that the ``events`` claim contains the expected events.

        Parameters
        ----------
        expected
            Event identifiers that must each be present with an object value.

        Raises
        ------
        InvalidTokenError
            Raised if the claim is missing, is not an object, or lacks one of
            the expected events.
        """
        claim = self._get_claim("events")
        if not isinstance(claim, dict):
            raise InvalidTokenError.missing_events_claim()
        for event in expected:
            if not isinstance(claim.get(event), dict):
                raise InvalidTokenError.bad_event_claim(event, "object")
        return self

    def expiration(
        self, leeway: int = DEFAULT_LEEWAY, now: int | None = None
    ) -> Self:
        """Check that the token has not expired.

        Parameters
        ----------
        leeway
            Clock skew to allow, in seconds.
        now
            Current time in seconds since epoch. Defaults to the current
            time.

        Raises
        ------
        InvalidTokenError
            Raised if the ``exp`` claim is missing or in the past.
        """
        claim = self._get_claim("exp")
        if claim is None:
            raise InvalidTokenError.missing_exp_claim()
        now = self._now(now)
        expires = int(self._as_number(claim)) + leeway
        if now > expires:
            raise InvalidTokenError.mismatched_exp_claim(now, expires)
        return self

    def issued(self) -> Self:
        """Check that the token has an ``iat`` claim."""
        if self._get_claim("iat") is None:
            raise InvalidTokenError.missing_iat_claim()
        return self

    def issuer(self, expected: str) -> Self:
        """Check that the ``iss`` claim matches exactly."""
        claim = self._get_claim("iss")
        if claim is None:
            raise InvalidTokenError.missing_iss_claim()
        if claim != expected:
            raise InvalidTokenError.mismatched_iss_claim(expected, claim)
        return self

    def nonce(self, expected: str) -> Self:
        """Check that the ``nonce`` claim matches exactly."""
        claim = self._get_claim("nonce")
        if claim is None:
            raise InvalidTokenError.missing_nonce_claim()
        if claim != expected:
            raise InvalidTokenError.mismatched_nonce_claim(expected, claim)
        return self

    def organization(self, expected: Iterable[str]) -> Self:
        """Check that the ``org_id`` claim is one of the expected values."""
        claim = self._get_claim("org_id")
        if claim is None:
            raise InvalidTokenError.missing_org_id_claim()
        expected = list(expected)
        if claim not in expected:
            raise InvalidTokenError.mismatched_org_id_claim(expected, claim)
        return self

    def subject(self) -> Self:
        """Check that the token has a ``sub`` claim."""
        if self._get_claim("sub") is None:
            raise InvalidTokenError.missing_sub_claim()
        return self

    def _get_claim(self, key: str) -> JSONValue:
        return self._claims.get(key)

    @staticmethod
    def _as_number(value: Any) -> float:
        """Convert a time-based claim to seconds since epoch.

        Numeric strings are accepted. Any other value, including infinite and
        NaN values, is treated as zero, which always fails the time
        comparison.
        """
        if isinstance(value, bool):
            return 0
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return 0
        if isinstance(value, float) and math.isfinite(value):
            return value
        return 0

    @staticmethod
    def _now(now: int | None) -> int:
        if now is not None:
            return now
        return int(current_datetime().timestamp())
