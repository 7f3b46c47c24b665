"""
Key-based cache for scraper results with a single fixed TTL.
"""
import threading
import logging
from typing import Any, Dict, List, Optional

from .core import CacheEntry, Clock, DEFAULT_TTL_SECONDS, utcnow

logger = logging.getLogger("cache.manager")


class CacheManager:
    """
    Process-wide mapping from cache key to CacheEntry.

    Lifecycle: empty on construction, filled by successful fetches, emptied
    only by clear(). Stale entries stay in the map until overwritten or
    cleared; lookup() simply refuses to serve them.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the cache manager.

        Args:
            ttl_seconds: Freshness window for every entry
            clock: Returns the current aware datetime (injectable for tests)
        """
        self._cache: Dict[str, CacheEntry] = {}
        self._cache_lock = threading.RLock()
        self._ttl_seconds = ttl_seconds
        self._clock = clock or utcnow

        # Stats tracking
        self._stats = {
            "hits": 0,
            "misses": 0,
            "stale": 0,
            "stores": 0,
        }

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def lookup(self, cache_key: str) -> Optional[List[Any]]:
        """
        Return the cached items for a key if they are still fresh.

        Returns:
            The stored items, or None on a miss or a stale entry
        """
        with self._cache_lock:
            entry = self._cache.get(cache_key)
            now = self._clock()

            if entry is None:
                logger.debug(f"CACHE MISS: {cache_key}")
                self._stats["misses"] += 1
                return None

            if not entry.is_fresh(now):
                logger.info(f"CACHE STALE: {cache_key} [age={entry.age_seconds(now):.1f}s]")
                self._stats["stale"] += 1
                self._stats["misses"] += 1
                return None

            logger.info(f"CACHE HIT: {cache_key} [age={entry.age_seconds(now):.1f}s]")
            self._stats["hits"] += 1
            return list(entry.items)

    def store(self, cache_key: str, items: List[Any]) -> CacheEntry:
        """Store items under a key, replacing any previous entry."""
        entry = CacheEntry(
            items=tuple(items),
            stored_at=self._clock(),
            ttl_seconds=self._ttl_seconds,
        )
        with self._cache_lock:
            self._cache[cache_key] = entry
            self._stats["stores"] += 1
        logger.debug(f"Stored {len(entry.items)} items under {cache_key}")
        return entry

    def get_entry(self, cache_key: str) -> Optional[CacheEntry]:
        """Raw entry access, fresh or not."""
        with self._cache_lock:
            return self._cache.get(cache_key)

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries cleared
        """
        with self._cache_lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info(f"Cleared {count} cache entries")
        return count

    @property
    def size(self) -> int:
        with self._cache_lock:
            return len(self._cache)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._cache_lock:
            total_requests = self._stats["hits"] + self._stats["misses"]
            hit_rate = (self._stats["hits"] / total_requests * 100) if total_requests > 0 else 0

            return {
                "entries": len(self._cache),
                "ttl_seconds": self._ttl_seconds,
                "hits": self._stats["hits"],
                "misses": self._stats["misses"],
                "stale": self._stats["stale"],
                "stores": self._stats["stores"],
                "hit_rate_percent": round(hit_rate, 1),
                "keys": sorted(self._cache.keys()),
            }
