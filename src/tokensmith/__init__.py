"""JWT parsing, validation, verification, and signing."""

from .assertion import ClientAssertionGenerator
from .cache import KeySetCache, MemoryKeySetCache
from .config import TokenConfig
from .exceptions import (
    FetchKeysError,
    InvalidTokenError,
    InvalidTokenKind,
    TokenError,
    TokenGenerationError,
    TokenGenerationKind,
)
from .generator import TokenGenerator
from .keypair import RSAKeyPair
from .models.enums import Algorithm, TokenType
from .parser import TokenParser
from .token import Token
from .validator import TokenValidator
from .verifier import TokenVerifier

__all__ = [
    "Algorithm",
    "ClientAssertionGenerator",
    "FetchKeysError",
    "InvalidTokenError",
    "InvalidTokenKind",
    "KeySetCache",
    "MemoryKeySetCache",
    "RSAKeyPair",
    "Token",
    "TokenConfig",
    "TokenError",
    "TokenGenerationError",
    "TokenGenerationKind",
    "TokenGenerator",
    "TokenParser",
    "TokenType",
    "TokenValidator",
    "TokenVerifier",
]
