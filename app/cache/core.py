"""
Core cache data structures.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Tuple

DEFAULT_TTL_SECONDS = 300


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    """
    Raw scraper items stored under one cache key, held as a tuple.

    Entries are replaced on refresh, never mutated. Freshness is evaluated
    lazily by the reader; nothing expires an entry on a timer.
    """
    items: Tuple[Any, ...]
    stored_at: datetime
    ttl_seconds: int = DEFAULT_TTL_SECONDS

    def age_seconds(self, now: datetime) -> float:
        """Seconds since the items were stored."""
        return (now - self.stored_at).total_seconds()

    def is_fresh(self, now: datetime) -> bool:
        """Check if the entry is within its TTL."""
        return self.age_seconds(now) < self.ttl_seconds


Clock = Callable[[], datetime]
