"""Caches for retrieved key sets.

`~tokensmith.verifier.TokenVerifier` accepts any object implementing the
`KeySetCache` protocol, so applications can store key sets in whatever
shared cache they already run. `MemoryKeySetCache` is a simple per-process
implementation.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from cachetools import TLRUCache

from .constants import KEY_SET_CACHE_SIZE

__all__ = ["KeySetCache", "MemoryKeySetCache"]


class KeySetCache(Protocol):
    """Interface for a cache of key sets.

    Values are plain JSON-compatible structures, so implementations are free
    to serialize them.
    """

    def get(self, key: str) -> Any | None:
        """Return the cached value for ``key``, or `None` on a miss."""

    def set(self, key: str, value: Any, ttl: int) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""


@dataclass(frozen=True, slots=True)
class _CacheEntry:
    value: Any
    ttl: int


def _expiration(key: str, entry: _CacheEntry, now: float) -> float:
    return now + entry.ttl


class MemoryKeySetCache:
    """In-memory key set cache with a per-entry lifetime.

    Parameters
    ----------
    maxsize
        Maximum number of entries. The least recently used entry is evicted
        when the cache is full.
    timer
        Clock used to expire entries, in seconds. Overridden by tests.
    """

    def __init__(
        self,
        maxsize: int = KEY_SET_CACHE_SIZE,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TLRUCache[str, _CacheEntry] = TLRUCache(
            maxsize, ttu=_expiration, timer=timer
        )
        self._lock = threading.Lock()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

    def clear(self) -> None:
        """Invalidate the cache.

        Used primarily for testing.
        """
        with self._lock:
            self._cache.clear()

    def get(self, key: str) -> Any | None:
        """Retrieve a cached value.

        Parameters
        ----------
        key
            Cache key.

        Returns
        -------
        Any or None
            The cached value, or `None` if it is not cached or has expired.
        """
        with self._lock:
            entry = self._cache.get(key)
        return entry.value if entry else None

    def set(self, key: str, value: Any, ttl: int) -> None:
        """Store a value in the cache.

        Parameters
        ----------
        key
            Cache key.
        value
            Value to store.
        ttl
            Lifetime of the entry in seconds. Entries with a lifetime of zero
            or less are not stored.
        """
        if ttl <= 0:
            return
        with self._lock:
            self._cache[key] = _CacheEntry(value=value, ttl=ttl)
