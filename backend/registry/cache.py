"""
In-memory cache of registry search results.

Entries expire after a fixed TTL but are never swept: an expired entry stays
in the map until the same query is fetched again and overwrites it. Failed
fetches are not cached.
"""
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from models import SearchQuery, SearchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: SearchResult
    stored_at: float


class ResponseCache:
    def __init__(self, ttl: float = 60 * 60, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def size(self) -> int:
        return len(self._entries)

    def get(self, query: SearchQuery) -> SearchResult | None:
        """Return the cached result for `query` if it is still fresh."""
        entry = self._entries.get(query.cache_key())
        if entry is None or self._clock() - entry.stored_at >= self.ttl:
            return None
        return entry.value

    def put(self, query: SearchQuery, value: SearchResult) -> None:
        key = query.cache_key()
        self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    async def get_or_fetch(
        self,
        query: SearchQuery,
        fetch: Callable[[SearchQuery], Awaitable[SearchResult]],
    ) -> SearchResult:
        cached = self.get(query)
        if cached is not None:
            logger.debug("Cache hit for %s", query.cache_key())
            return cached

        logger.debug("Cache miss for %s", query.cache_key())
        result = await fetch(query)
        self.put(query, result)
        return result

    def clear(self) -> None:
        self._entries.clear()
