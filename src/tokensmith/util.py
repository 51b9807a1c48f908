"""General utility functions.

The base64url helpers here implement the segment encoding used by JWS
(RFC 7515): standard base64 with ``-`` and ``_`` in place of ``+`` and
``/`` and with all padding removed.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import os
import time
import uuid
from typing import Any

from .exceptions import InvalidTokenError

__all__ = [
    "add_padding",
    "base64url_decode",
    "base64url_encode",
    "decode_json_segment",
    "encode_segment",
    "hash_uri",
    "number_to_base64",
    "random_jti",
]


def add_padding(encoded: str) -> str:
    """Add padding to base64 encoded bytes.

    Parameters
    ----------
    encoded
        A base64-encoded string, possibly with the padding removed.

    Returns
    -------
    str
        A correctly-padded version of the encoded string.
    """
    underflow = len(encoded) % 4
    if underflow:
        return encoded + ("=" * (4 - underflow))
    else:
        return encoded


def base64url_encode(data: bytes) -> str:
    """Encode bytes using base64url without padding."""
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


def base64url_decode(segment: str) -> bytes:
    """Decode a base64url string, with or without padding.

    Parameters
    ----------
    segment
        Encoded data.

    Returns
    -------
    bytes
        The decoded bytes.

    Raises
    ------
    ValueError
        Raised if the segment contains characters outside the base64url
        alphabet or has an impossible length.
    """
    if "+" in segment or "/" in segment or "=" in segment.rstrip("="):
        raise ValueError("Invalid base64url data: not in base64url alphabet")
    translated = segment.replace("-", "+").replace("_", "/")
    try:
        return base64.b64decode(add_padding(translated), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64url data: {e!s}") from e


def encode_segment(data: Any) -> str:
    """Serialize data as compact JSON and encode it as a token segment.

    Parameters
    ----------
    data
        Any JSON-serializable value.

    Returns
    -------
    str
        The base64url encoding of the UTF-8 JSON serialization.

    Raises
    ------
    TypeError
        Raised if the data cannot be serialized to JSON.
    ValueError
        Raised if the data contains values, such as NaN, that have no JSON
        representation.
    """
    serialized = json.dumps(data, separators=(",", ":"), allow_nan=False)
    return base64url_encode(serialized.encode())


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode_json_segment(segment: str, name: str) -> dict[str, Any]:
    """Decode a base64url token segment containing a JSON object.

    Parameters
    ----------
    segment
        Encoded segment.
    name
        Name of the segment, used in error messages.

    Returns
    -------
    dict of Any
        The decoded JSON object.

    Raises
    ------
    InvalidTokenError
        Raised if the segment is not valid base64url, is not valid UTF-8
        JSON, or does not decode to a JSON object.
    """
    try:
        decoded = json.loads(
            base64url_decode(segment).decode(), parse_constant=_reject_constant
        )
    except (UnicodeDecodeError, ValueError) as e:
        raise InvalidTokenError.malformed_segment(name, str(e)) from e
    if not isinstance(decoded, dict):
        msg = f"expected a JSON object, found {type(decoded).__name__}"
        raise InvalidTokenError.malformed_segment(name, msg)
    return decoded

def hash_uri(uri: str) -> str:
    """Return a stable cache key for a URI."""
    return hashlib.sha256(uri.encode()).hexdigest()


def number_to_base64(data: int) -> bytes:
    """Convert an integer to base64-encoded bytes in big endian order.

    The base64 encoding used here is the Base64urlUInt encoding defined in RFC
    7515 and 7518, which uses the URL-safe encoding characters and omits all
    padding.

    Parameters
    ----------
    data
        Arbitrarily large number

    Returns
    -------
    bytes
        The equivalent URL-safe base64-encoded string corresponding to the
        number in big endian order.
    """
    bit_length = data.bit_length()
    byte_length = bit_length // 8 + 1
    data_as_bytes = data.to_bytes(byte_length, byteorder="big", signed=False)
    return base64.urlsafe_b64encode(data_as_bytes).rstrip(b"=")


def random_jti() -> str:
    """Generate a unique, unguessable token identifier.

    Combines a time-based unique value with 32 random bytes and returns the
    SHA-256 hex digest of the result.
    """
    unique = f"{time.time_ns()}:{uuid.uuid1().hex}:{os.urandom(32).hex()}"
    return hashlib.sha256(unique.encode()).hexdigest()
