"""Constants for tokensmith."""

__all__ = [
    "BACKCHANNEL_LOGOUT_EVENT",
    "CLIENT_ASSERTION_LIFETIME",
    "DEFAULT_CACHE_TTL",
    "DEFAULT_LEEWAY",
    "DEFAULT_TOKEN_TYPE",
    "HTTP_TIMEOUT",
    "JWKS_PATH",
    "KEY_SET_CACHE_SIZE",
]

BACKCHANNEL_LOGOUT_EVENT = "http://schemas.openid.net/event/backchannel-logout"
"""Event that must be present in the ``events`` claim of a logout token."""

CLIENT_ASSERTION_LIFETIME = 180
"""Lifetime (in seconds) of a generated client assertion."""

DEFAULT_CACHE_TTL = 60
"""How long (in seconds) to cache a retrieved key set if not configured."""

DEFAULT_LEEWAY = 60
"""Clock skew (in seconds) to allow when checking time-based claims."""

DEFAULT_TOKEN_TYPE = "JWT"
"""Value of the ``typ`` header if the token does not provide one."""

HTTP_TIMEOUT = 20.0
"""Timeout (in seconds) for outbound HTTP requests to retrieve key sets."""

JWKS_PATH = "/.well-known/jwks.json"
"""Path of the key set if the key set URI does not specify one."""

KEY_SET_CACHE_SIZE = 100
"""Maximum number of key sets to hold in the in-memory cache."""
