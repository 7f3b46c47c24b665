"""
In-process TTL cache for scraper results, with optional request coalescing.
"""
from .core import CacheEntry, DEFAULT_TTL_SECONDS
from .coalescer import RequestCoalescer
from .manager import CacheManager

__all__ = [
    # Core types
    "CacheEntry",
    "DEFAULT_TTL_SECONDS",
    # Coalescing
    "RequestCoalescer",
    # Manager
    "CacheManager",
]
