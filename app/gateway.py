"""
Memoized fetch gateway: the only path from a request descriptor to the
scraper, guarded by the TTL cache.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol

from app.apify_client import ActorRun, ScraperError, classify_message
from app.cache import CacheManager, RequestCoalescer
from app.descriptors import RequestDescriptor
from app.errors import (
    ERROR_CLASSES,
    ConfigurationError,
    ErrorKind,
    NotFoundError,
    TokViewError,
)

logger = logging.getLogger("gateway")

_USE_DESCRIPTOR_KEY = object()


class ScraperClient(Protocol):
    """The external capability the gateway depends on."""

    def is_configured(self) -> bool: ...

    def call_actor(self, payload: Dict[str, Any]) -> ActorRun: ...

    def list_items(self, dataset_id: str) -> List[Dict[str, Any]]: ...

    def current_user(self) -> Dict[str, Any]: ...


def not_found_message(descriptor: RequestDescriptor) -> str:
    if descriptor.kind.targets_profile:
        return f"Profile @{descriptor.subject} not found, is private, or has no public videos"
    return f"No content found for {descriptor.describe()}"


def to_classified_error(error: Exception, descriptor: Optional[RequestDescriptor] = None) -> TokViewError:
    """Map a scraper failure onto the caller-facing error taxonomy."""
    if isinstance(error, ScraperError):
        kind, detail = error.kind, error.detail
    else:
        # Black-box failure: fall back to the text of the error
        kind, detail = classify_message(str(error)), str(error)

    if kind == ErrorKind.AUTH:
        message = "Invalid Apify API key. Please check your environment variables."
    elif kind == ErrorKind.RATE_LIMIT:
        message = "API rate limit exceeded. Please try again later."
    elif kind == ErrorKind.NOT_FOUND:
        message = not_found_message(descriptor) if descriptor else f"Apify resource not found: {detail}"
    else:
        kind = ErrorKind.UPSTREAM
        message = f"Failed to fetch data: {detail}"

    return ERROR_CLASSES[kind](message, detail=detail)


class FetchGateway:
    """
    Returns raw scraper items for a descriptor, from cache when fresh.

    No retries and no timeout of its own: a failed upstream call is raised
    immediately as a classified error.
    """

    def __init__(
        self,
        client: ScraperClient,
        cache: CacheManager,
        coalescer: Optional[RequestCoalescer] = None,
    ):
        self._client = client
        self._cache = cache
        self._coalescer = coalescer

    @property
    def client(self) -> ScraperClient:
        return self._client

    @property
    def cache(self) -> CacheManager:
        return self._cache

    def fetch(self, descriptor: RequestDescriptor, cache_key: Any = _USE_DESCRIPTOR_KEY) -> List[Dict[str, Any]]:
        """
        Get the raw items for a descriptor.

        Args:
            descriptor: What to scrape
            cache_key: Memoization key; defaults to the descriptor's key,
                None disables caching for this call

        Raises:
            ConfigurationError: No usable Apify token (no call is made)
            NotFoundError: The scraper returned no items
            AuthError, RateLimitError, UpstreamError: Classified failures
        """
        if cache_key is _USE_DESCRIPTOR_KEY:
            cache_key = descriptor.cache_key

        if not self._client.is_configured():
            raise ConfigurationError(
                "Apify API key not configured. Please set APIFY_API_KEY environment variable."
            )

        if cache_key:
            cached = self._cache.lookup(cache_key)
            if cached is not None:
                return cached

        def fetch_fresh() -> List[Dict[str, Any]]:
            items = self._fetch_upstream(descriptor)
            if cache_key:
                self._cache.store(cache_key, items)
            return items

        if self._coalescer is not None and cache_key:
            return self._coalescer.run(cache_key, fetch_fresh)
        return fetch_fresh()

    def _fetch_upstream(self, descriptor: RequestDescriptor) -> List[Dict[str, Any]]:
        logger.info(f"Fetching fresh data for: {descriptor.cache_key}")
        try:
            run = self._client.call_actor(dict(descriptor.payload))
            items = self._client.list_items(run.dataset_id)
        except Exception as e:
            error = to_classified_error(e, descriptor)
            logger.error(f"Apify scraper error for {descriptor.cache_key}: {error.detail}")
            raise error from e

        if not items:
            logger.warning(f"No items returned for {descriptor.cache_key}")
            raise NotFoundError(not_found_message(descriptor), detail=descriptor.subject)

        return list(items)
