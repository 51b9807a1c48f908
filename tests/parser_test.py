"""Tests for parsing encoded tokens."""

from __future__ import annotations

import pytest

from tokensmith.exceptions import InvalidTokenError, InvalidTokenKind
from tokensmith.parser import TokenParser
from tokensmith.util import base64url_decode, base64url_encode, encode_segment
from tokensmith.validator import TokenValidator

from .support.constants import TEST_CLIENT_SECRET
from .support.tokens import create_hmac_token, id_token_claims


def test_parse() -> None:
    claims = id_token_claims(nonce="some-nonce")
    token = create_hmac_token(claims)
    parser = TokenParser.parse(token)

    assert parser.raw == token
    assert parser.parts == token.split(".")
    assert parser.payload == token.rsplit(".", 1)[0]
    assert parser.signature == base64url_decode(token.split(".")[2])
    assert parser.headers == {"typ": "JWT", "alg": "HS256"}
    assert parser.claims == claims

    assert parser.get_claim("nonce") == "some-nonce"
    assert parser.get_claim("org_id") is None
    assert parser.has_claim("sub")
    assert not parser.has_claim("org_id")
    assert parser.get_header("alg") == "HS256"
    assert parser.has_header("typ")
    assert not parser.has_header("kid")
    assert parser.get_header("kid") is None


def test_accessors_return_copies() -> None:
    parser = TokenParser(create_hmac_token())
    parser.claims["sub"] = "someone-else"
    parser.headers["alg"] = "none"
    parser.parts.clear()

    assert parser.get_claim("sub") == "auth0|some-user"
    assert parser.get_header("alg") == "HS256"
    assert len(parser.parts) == 3


def test_default_type() -> None:
    header = encode_segment({"alg": "HS256"})
    claims = encode_segment({"sub": "some-user"})
    token = f"{header}.{claims}.{base64url_encode(b'signature')}"
    parser = TokenParser.parse(token)

    assert parser.get_header("typ") == "JWT"
    assert parser.headers == {"alg": "HS256", "typ": "JWT"}
    assert parser.raw == token
    assert parser.parts[0] == header
    assert parser.signature == b"signature"


def test_bad_separators() -> None:
    for token in ("onepart", "two.parts", "not.a.valid.jwt.with.six.parts"):
        with pytest.raises(InvalidTokenError) as excinfo:
            TokenParser.parse(token)
        assert excinfo.value.kind == InvalidTokenKind.bad_separators
        assert str(excinfo.value) == "The JWT string must contain two dots"


def test_malformed_segments() -> None:
    valid = encode_segment({"alg": "HS256"})
    not_json = base64url_encode(b"not json")
    tests = [
        ("a.b.c", "header"),
        (f"{not_json}.{valid}.", "header"),
        (f"{valid}.{not_json}.", "claims"),
        (f"{valid}.{encode_segment('string')}.", "claims"),
        (f"{valid}.{valid}.%%%%", "signature"),
    ]
    for token, segment in tests:
        with pytest.raises(InvalidTokenError) as excinfo:
            TokenParser.parse(token)
        assert excinfo.value.kind == InvalidTokenKind.malformed_segment
        assert excinfo.value.details["segment"] == segment


def test_non_finite_numbers() -> None:
    header = encode_segment({"alg": "HS256"})
    for constant in ("NaN", "Infinity", "-Infinity"):
        claims = base64url_encode(f'{{"exp":{constant}}}'.encode())
        with pytest.raises(InvalidTokenError) as excinfo:
            TokenParser.parse(f"{header}.{claims}.")
        assert excinfo.value.kind == InvalidTokenKind.malformed_segment
        assert excinfo.value.details["segment"] == "claims"

    for exp in ("1e400", '"inf"', '"nan"'):
        claims = base64url_encode(f'{{"exp":{exp}}}'.encode())
        validator = TokenParser.parse(f"{header}.{claims}.").validate()
        with pytest.raises(InvalidTokenError) as excinfo:
            validator.expiration()
        assert excinfo.value.kind == InvalidTokenKind.mismatched_exp_claim


def test_validate() -> None:
    parser = TokenParser.parse(create_hmac_token())
    validator = parser.validate()
    assert isinstance(validator, TokenValidator)
    assert validator.subject() is validator


def test_verify() -> None:
    parser = TokenParser.parse(create_hmac_token())
    assert parser.verify("HS256", client_secret=TEST_CLIENT_SECRET) is parser
    assert parser.verify(None, client_secret=TEST_CLIENT_SECRET) is parser

    with pytest.raises(InvalidTokenError) as excinfo:
        parser.verify("HS256", client_secret="wrong-secret")
    assert excinfo.value.kind == InvalidTokenKind.bad_signature

    with pytest.raises(InvalidTokenError) as excinfo:
        parser.verify(client_secret=TEST_CLIENT_SECRET)
    assert excinfo.value.kind == InvalidTokenKind.unexpected_signing_algorithm
