"""
TikTok content service: the four query operations plus cache inspection.
Transport-agnostic; the FastAPI layer in app.main renders its results.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app import descriptors
from app.apify_client import ApifyClient
from app.cache import CacheManager, RequestCoalescer
from app.descriptors import RequestDescriptor
from app.gateway import FetchGateway, to_classified_error
from app.errors import ConfigurationError
from app.view_models import (
    ProfilePayload,
    VideoPayload,
    normalize_profile,
    normalize_videos,
    videos_to_dicts,
)
from config.settings import settings

logger = logging.getLogger("tiktok_service")


@dataclass
class FeedResult:
    videos: List[VideoPayload] = field(default_factory=list)
    profile: Optional[ProfilePayload] = None

    @property
    def count(self) -> int:
        return len(self.videos)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videos": videos_to_dicts(self.videos),
            "profile": self.profile.to_dict() if self.profile else None,
            "count": self.count,
        }


class TikTokService:
    """Builds descriptors, fetches through the gateway and normalizes the items."""

    def __init__(self, gateway: FetchGateway):
        self._gateway = gateway

    @property
    def gateway(self) -> FetchGateway:
        return self._gateway

    def _run(self, descriptor: RequestDescriptor) -> FeedResult:
        items = self._gateway.fetch(descriptor)
        profile = None
        if descriptor.kind.targets_profile and items:
            first = items[0] if isinstance(items[0], dict) else {}
            profile = normalize_profile(first.get("authorMeta"))
        return FeedResult(videos=normalize_videos(items), profile=profile)

    def trending(self) -> FeedResult:
        return self._run(descriptors.trending())

    def by_hashtag(self, tag: str) -> FeedResult:
        return self._run(descriptors.hashtag(tag))

    def by_profile(self, username: str) -> FeedResult:
        return self._run(descriptors.profile(username))

    def search(self, query: str) -> FeedResult:
        return self._run(descriptors.search(query))

    def clear_cache(self) -> int:
        """Drop every cached entry; returns how many there were."""
        return self._gateway.cache.clear()

    def cache_status(self) -> Dict[str, Any]:
        return {
            "size": self._gateway.cache.size,
            "isConfigured": self._gateway.client.is_configured(),
        }

    def verify_credentials(self) -> Dict[str, Any]:
        """
        Check the Apify token out of band.

        Raises:
            ConfigurationError: No token configured
            AuthError, RateLimitError, UpstreamError: The check failed
        """
        client = self._gateway.client
        if not client.is_configured():
            raise ConfigurationError("Apify API key not configured")
        try:
            user = client.current_user()
        except Exception as e:
            error = to_classified_error(e)
            logger.warning(f"Apify credential check failed: {error.detail}")
            raise error from e
        return {"username": user.get("username"), "id": user.get("id")}


def build_service() -> TikTokService:
    """Wire a service from settings."""
    client = ApifyClient(
        token=settings.apify_api_key,
        actor_id=settings.apify_actor_id,
        base_url=settings.apify_base_url,
        timeout=settings.request_timeout_seconds,
        run_timeout=settings.apify_run_timeout_seconds,
    )
    if not client.is_configured():
        logger.warning("APIFY_API_KEY is not set; API routes will fail until it is configured")
    cache = CacheManager(ttl_seconds=settings.cache_ttl_seconds)
    coalescer = RequestCoalescer() if settings.cache_coalesce_requests else None
    return TikTokService(FetchGateway(client, cache, coalescer=coalescer))


# Global service instance (its cache lives as long as the process)
_service: Optional[TikTokService] = None


def get_service() -> TikTokService:
    """Get or create the global service."""
    global _service
    if _service is None:
        _service = build_service()
    return _service
