"""
TTL Cache

Small in-process cache with a fixed time-to-live per instance.

Design Decisions:
- Lazy eviction: entries are checked for expiry on access, there is no
  background sweeper
- Clock is injectable so expiry can be tested without sleeping
- No locking: all access happens on the event loop thread
"""

import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


class TTLCache:
    """
    Mapping from key to value where every entry expires `ttl_seconds`
    after it was stored.
    """

    def __init__(self, ttl_seconds: float, clock: Optional[Callable[[], float]] = None):
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: Dict[Hashable, Tuple[Any, float]] = {}

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (value, self._clock())

    def get(self, key: Hashable) -> Optional[Any]:
        """
        Return the cached value, or None if missing or expired.

        Expired entries are removed as a side effect.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, inserted_at = entry
        if self._clock() - inserted_at > self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def delete(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict:
        # size counts expired-but-unvisited entries too
        return {"size": len(self._entries), "ttlSeconds": self.ttl_seconds}

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
