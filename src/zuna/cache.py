"""In-process TTL cache for slow-changing content."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class _Entry(Generic[T]):
    data: T
    expires_at: float


class TTLCache(Generic[T]):
    """Keyed cache with per-entry expiry and a size cap.

    At capacity the oldest *inserted* entry is evicted (dict order, not LRU).
    Concurrent misses on one key both run the fetcher; the last write wins.
    TTLs are in seconds.
    """

    def __init__(
        self,
        default_ttl: float,
        max_size: int = 100,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            msg = "max_size must be at least 1"
            raise ValueError(msg)
        self._default_ttl = default_ttl
        self._max_size = max_size
        self._timer = timer
        self._entries: dict[str, _Entry[T]] = {}

    def get(self, key: str) -> T | None:
        """Cached value, or None when missing or expired (expired entries are dropped)."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._timer() > entry.expires_at:
            del self._entries[key]
            return None
        return entry.data

    def set(self, key: str, data: T, ttl: float | None = None) -> None:
        if key not in self._entries and len(self._entries) >= self._max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        expires_at = self._timer() + (self._default_ttl if ttl is None else ttl)
        # Replacing keeps the key's original insertion position
        self._entries[key] = _Entry(data, expires_at)

    async def get_or_fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        cached = self.get(key)
        if cached is not None:
            return cached
        data = await fetcher()
        self.set(key, data, ttl)
        return data

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and self._timer() <= entry.expires_at
