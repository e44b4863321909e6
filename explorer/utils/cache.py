"""
In-process TTL cache placed in front of folder, file and search reads.
"""
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from fastapi import Request

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 30.0
DEFAULT_MAX_ENTRIES = 200


class SimpleCache:
    """
    Bounded key/value cache with a fixed time-to-live per entry.

    When full, the entry that was inserted first is evicted regardless of how
    recently it was read. Every worker process owns its own instance, so a
    stale read is bounded by the TTL.

    Args:
        ttl_seconds: Lifetime of an entry after it is set
        max_entries: Capacity before insertion-order eviction kicks in
        clock: Monotonic time source, replaceable in tests
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # dicts keep insertion order, which is the eviction order
        self._store: Dict[str, Tuple[Any, float]] = {}

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() > expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        if key not in self._store and len(self._store) >= self.max_entries:
            oldest_key = next(iter(self._store))
            del self._store[oldest_key]
        self._store[key] = (value, self._clock() + self.ttl_seconds)

    async def get_or_set(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached value for `key`, or await `loader` and cache its result.

        Concurrent misses on the same key each run their own loader.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        value = await loader()
        self.set(key, value)
        return value

    def delete_by_prefix(self, prefix: str) -> None:
        for key in [k for k in self._store if k.startswith(prefix)]:
            del self._store[key]

    def clear(self) -> None:
        self._store.clear()


def get_cache(request: Request) -> SimpleCache:
    """FastAPI dependency returning the cache created at application startup."""
    return request.app.state.cache
