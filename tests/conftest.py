"""Test fixtures."""

from __future__ import annotations

import os

import pytest

from tokensmith.cache import MemoryKeySetCache
from tokensmith.config import TokenConfig

from .support.constants import TEST_CLIENT_ID, TEST_CLIENT_SECRET, TEST_DOMAIN


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove any tokensmith settings from the environment."""
    for name in list(os.environ):
        if name.startswith("TOKENSMITH_"):
            monkeypatch.delenv(name)


@pytest.fixture
def cache() -> MemoryKeySetCache:
    return MemoryKeySetCache()


@pytest.fixture
def config() -> TokenConfig:
    return TokenConfig(
        domain=TEST_DOMAIN,
        client_id=TEST_CLIENT_ID,
        client_secret=TEST_CLIENT_SECRET,
    )
