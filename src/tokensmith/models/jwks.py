"""Representation of JSON Web Key Sets."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["JWK", "JWKS"]


class JWK(BaseModel):
    """The schema for a JSON Web Key (RFCs 7517 and 7518).

    Only the fields tokensmith uses are declared. Any other parameters of the
    key are preserved so that the record can be cached and republished
    unchanged.
    """

    model_config = ConfigDict(extra="allow")

    kid: str | None = Field(
        None,
        title="Key ID",
        description=(
            "A name for the key, also used in the header of a JWT signed by"
            " that key. Allows the signer to have multiple valid keys at a"
            " time and thus support key rotation."
        ),
        examples=["some-key-id"],
    )

    kty: str | None = Field(
        None,
        title="Key type",
        description="Cryptographic family of the key",
        examples=["RSA"],
    )

    alg: str | None = Field(
        None,
        title="Algorithm",
        description="Algorithm the key is intended to be used with",
        examples=["RS256"],
    )

    use: str | None = Field(
        None,
        title="Key usage",
        description="Intended use of the public key",
        examples=["sig"],
    )

    n: str | None = Field(
        None,
        title="RSA modulus",
        description=(
            "Big-endian modulus of the key, encoded in base64url without"
            " padding"
        ),
    )

    e: str | None = Field(
        None,
        title="RSA exponent",
        description=(
            "Big-endian exponent of the key, encoded in base64url without"
            " padding"
        ),
        examples=["AQAB"],
    )

    x5c: list[str] = Field(
        [],
        title="X.509 certificate chain",
        description=(
            "Chain of base64-encoded DER certificates. The first certificate"
            " contains the public key."
        ),
    )

    def to_record(self) -> dict[str, Any]:
        """Convert to the plain dictionary stored in a key set cache."""
        return self.model_dump(exclude_none=True)


class JWKS(BaseModel):
    """Schema for a ``/.well-known/jwks.json`` document."""

    keys: list[JWK] = Field(
        ...,
        title="Signing keys",
        description="Valid signing keys for JWTs",
    )

    def signing_keys(self) -> dict[str, dict[str, Any]]:
        """Index the usable keys by key ID.

        Returns
        -------
        dict of dict
            Mapping of key ID to key record. Keys without a key ID or without
            an X.509 certificate chain are omitted.
        """
        return {k.kid: k.to_record() for k in self.keys if k.kid and k.x5c}
