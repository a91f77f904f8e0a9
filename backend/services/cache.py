"""Simple in-memory TTL cache for scraped responses. No Redis needed.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
a page may be scraped twice (once per worker). Concurrent misses for the
same key inside one worker also each fetch; the last write wins.
"""

import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    stored_at: float


class TTLCache:
    """Key/value store where every entry expires ``ttl_seconds`` after it was set.

    Expired entries are dropped lazily when looked up, or in bulk by
    ``purge_expired``. With ``max_entries`` set, inserting a new key into a
    full cache evicts the least recently used entry.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries is not None and max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self.ttl = ttl_seconds
        self.max_entries = max_entries or None
        self._clock = clock
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at < self.ttl

    def get(self, key: str) -> Any | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry, self._clock()):
            del self._store[key]
            return None
        self._store.move_to_end(key)
        return entry.value

    def set(self, key: str, value: Any) -> Any:
        if key in self._store:
            del self._store[key]
        elif self.max_entries and len(self._store) >= self.max_entries:
            evicted, _ = self._store.popitem(last=False)
            logger.debug("Cache full, evicted %s", evicted)
        self._store[key] = CacheEntry(key=key, value=value, stored_at=self._clock())
        return value

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        stale = [key for key, entry in self._store.items() if not self._is_fresh(entry, now)]
        for key in stale:
            del self._store[key]
        return len(stale)

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: str) -> bool:
        entry = self._store.get(key)
        return entry is not None and self._is_fresh(entry, self._clock())

    def __len__(self) -> int:
        return len(self._store)


def make_key(operation: str, params: Mapping[str, Any] | None = None) -> str:
    """Build the cache key for an operation and its result-relevant params.

    Params with a None value are left out and values are stringified, so
    ``{"page": 2}`` and ``{"page": "2"}`` share a key. Ordering never matters.
    """
    items = sorted((str(k), str(v)) for k, v in (params or {}).items() if v is not None)
    if not items:
        return operation
    return f"{operation}?{urlencode(items)}"


async def get_or_fetch(
    cache: TTLCache,
    key: str,
    fetch: Callable[[], Awaitable[Any]],
) -> tuple[Any, bool]:
    """Return ``(value, cached)``, calling ``fetch`` only on a miss.

    Nothing is stored when ``fetch`` raises.
    """
    cached = cache.get(key)
    if cached is not None:
        logger.debug("Cache hit: %s", key)
        return cached, True

    logger.debug("Cache miss: %s", key)
    value = await fetch()
    cache.set(key, value)
    return value, False
