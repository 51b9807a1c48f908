"""Type aliases for token data."""

from typing import Any, TypeAlias

__all__ = [
    "Claims",
    "Headers",
    "JSONValue",
    "KeySet",
]

JSONValue: TypeAlias = (
    str | int | float | bool | None | list["JSONValue"] | dict[str, "JSONValue"]
)
"""Any value that can appear in a decoded JSON document."""

Claims: TypeAlias = dict[str, JSONValue]
"""Decoded claims of a JWT."""

Headers: TypeAlias = dict[str, JSONValue]
"""Decoded headers of a JWT."""

KeySet: TypeAlias = dict[str, dict[str, Any]]
"""Key set indexed by key ID, in the form stored in a key set cache."""
