"""In-process enrichment cache.

Memoizes place/photo lookups by normalized query so repeat views of the same
item render immediately. Bounded LRU with optional expiry; reads never touch
the network.
"""

import logging
import re
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from tripweaver.core.config import settings

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_key(*parts: str | None) -> str:
    """Lowercase, whitespace-collapsed key built from the non-empty parts."""
    joined = " ".join(p for p in parts if p)
    return _WHITESPACE.sub(" ", joined).strip().lower()


@dataclass
class CacheEntry:
    value: Any
    timestamp: float


class EnrichmentCache:
    """
    Key -> value LRU cache.

    Args:
        capacity: Maximum number of entries; least recently used go first.
        ttl_seconds: Entry lifetime, ``None``/0 for process lifetime.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        capacity: int | None = None,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.capacity = capacity or settings.ENRICHMENT_CACHE_CAPACITY
        if ttl_seconds is None:
            ttl_seconds = settings.ENRICHMENT_CACHE_TTL
        self.ttl_seconds = ttl_seconds or None
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def _expired(self, entry: CacheEntry) -> bool:
        return (
            self.ttl_seconds is not None
            and self._clock() - entry.timestamp >= self.ttl_seconds
        )

    def get(self, key: str) -> Any | None:
        """Get a value, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if self._expired(entry):
            del self._entries[key]
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value, evicting the least recently used entry when full."""
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = CacheEntry(value=value, timestamp=self._clock())
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Enrichment cache evicted '{evicted}'")

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._expired(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0
