"""In-memory, time-boxed memoisation for fetched resource sets."""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable

from .config import CACHE_TTL_SECONDS

__all__ = ["TimedCache", "default_cache"]


class TimedCache:
    """Keep fetched values for ``ttl`` seconds within one process."""

    def __init__(self, ttl: float = CACHE_TTL_SECONDS, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        age = self._clock() - stored_at
        if age >= self.ttl:
            print(f"[INFO] Cache expired for {key} ({age:.0f}s old)")
            del self._entries[key]
            return None
        print(f"[INFO] Using cached data for {key} (saved {age:.0f}s ago)")
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    async def get_or_fetch(self, key: str, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        print(f"[INFO] Fetching fresh data for {key}")
        value = await fetcher()
        self.set(key, value)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


default_cache = TimedCache()
