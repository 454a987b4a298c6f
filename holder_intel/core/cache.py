"""In-memory TTL cache shared by analysis runs."""

import time
from typing import Any, Callable, Dict, Optional

import structlog

from holder_intel.models.token_data import CacheEntry

logger = structlog.get_logger(__name__)


class CacheStore:
    """
    Process-lifetime key/value cache with caller-supplied TTL.

    Entries are never refreshed in place: a write always replaces the entry
    with a new timestamp. Expired entries are evicted lazily on read.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: Dict[str, CacheEntry] = {}
        self._clock = clock

    @staticmethod
    def make_key(data_type: str, identifier: str) -> str:
        """Build a cache key namespaced by data type."""
        return f"{data_type}:{identifier}"

    def get(self, key: str, ttl: float) -> Optional[Any]:
        """Return the cached payload, or None if absent or older than ttl seconds."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        age = self._clock() - entry.created_at
        if age > ttl:
            del self._entries[key]
            logger.debug("Cache entry expired", key=key, age=round(age, 3), ttl=ttl)
            return None

        return entry.payload

    def set(self, key: str, payload: Any) -> None:
        self._entries[key] = CacheEntry(key=key, payload=payload, created_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
