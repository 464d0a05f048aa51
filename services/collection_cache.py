"""
Collection Cache

Explicitly scoped TTL cache for static JSON collections (NPC stations,
player structures). A job builds its own cache and hands it to the client
that needs it; nothing is held in module globals, so test runs and
scheduled runs never see each other's entries.

Only successful loads are stored. A loader that raises leaves the cache
untouched and the next get() tries again.
"""

import time
from typing import Any, Callable, Optional


class CollectionCache:
    """Key -> value cache with a fixed time-to-live and an injected clock.

    Args:
        ttl_seconds: Lifetime of an entry. 0 disables caching entirely.
        clock: Zero-argument callable returning seconds; defaults to
            time.monotonic
    """

    def __init__(self, ttl_seconds: float = 600.0, clock: Optional[Callable[[], float]] = None):
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str, loader: Callable[[], Any]) -> Any:
        """Return the cached value for key, calling loader on miss or expiry."""
        now = self._clock()
        entry = self._entries.get(key)
        if entry is not None:
            stored_at, value = entry
            if now - stored_at < self.ttl_seconds:
                return value
            del self._entries[key]

        value = loader()
        if self.ttl_seconds > 0:
            self._entries[key] = (now, value)
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one entry, or every entry when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._clock() - entry[0] < self.ttl_seconds

    def __len__(self) -> int:
        return len(self._entries)
