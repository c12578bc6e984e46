"""Simple TTL-based cache for decoded OASTH responses."""

import asyncio
import time
from typing import Generic, TypeVar

T = TypeVar("T")


class ResponseCache(Generic[T]):
    """Keyed TTL cache, one entry per endpoint/parameter pair.

    Each key has its own async lock so concurrent requests for the same
    resource trigger a single upstream fetch.
    """

    def __init__(self, ttl: float = 30.0):
        """Initialize the cache.

        Args:
            ttl: Time-to-live in seconds for cached values.
        """
        self._ttl = ttl
        self._entries: dict[str, tuple[T, float]] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> T | None:
        """Get the cached value for a key if it hasn't expired.

        Returns:
            The cached value if valid, None if expired or not set.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() < expires_at:
            return value
        del self._entries[key]
        return None

    def set(self, key: str, value: T) -> None:
        """Store a value under a key with TTL, pruning expired entries."""
        now = time.monotonic()
        self._prune(now)
        self._entries[key] = (value, now + self._ttl)

    def _prune(self, now: float) -> None:
        """Drop expired entries and the idle locks of keys without an entry."""
        for key in [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]:
            del self._entries[key]
        idle = [k for k, lock in self._locks.items() if k not in self._entries and not lock.locked()]
        for key in idle:
            del self._locks[key]

    def clear(self) -> None:
        """Drop every cached value."""
        self._entries.clear()

    def lock(self, key: str) -> asyncio.Lock:
        """Get the async lock coordinating fetches for a key."""
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def __len__(self) -> int:
        return len(self._entries)
