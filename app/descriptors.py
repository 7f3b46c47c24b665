"""
Request descriptors: translate a user-facing query into the Apify actor input
and the cache key that memoizes its result.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from app.errors import ValidationError

TRENDING_HASHTAGS = ("foryou", "viral", "trending")
RESULTS_PER_PAGE = 15
PROFILE_RESULTS_PER_PAGE = 20
MIN_TERM_LENGTH = 2


class QueryKind(Enum):
    TRENDING = "trending"
    HASHTAG = "hashtag"
    PROFILE = "profile"
    SEARCH_HASHTAG = "search_hashtag"
    SEARCH_PROFILE = "search_profile"
    SEARCH_KEYWORD = "search_keyword"

    @property
    def targets_profile(self) -> bool:
        return self in (QueryKind.PROFILE, QueryKind.SEARCH_PROFILE)


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of one scraper request."""
    kind: QueryKind
    subject: Optional[str]
    payload: Dict[str, Any] = field(compare=False)
    cache_key: str

    def describe(self) -> str:
        """Human readable target, used in log and error messages."""
        if self.kind == QueryKind.TRENDING:
            return "trending videos"
        if self.kind.targets_profile:
            return f"@{self.subject}"
        if self.kind == QueryKind.SEARCH_KEYWORD:
            return f'"{self.subject}"'
        return f"#{self.subject}"


def _payload(
    hashtags: Optional[List[str]] = None,
    profiles: Optional[List[str]] = None,
    results_per_page: int = RESULTS_PER_PAGE,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if hashtags is not None:
        payload["hashtags"] = hashtags
    if profiles is not None:
        payload["profiles"] = profiles
    payload.update({
        "proxyCountryCode": "None",
        "resultsPerPage": results_per_page,
        "shouldDownloadVideos": False,
        "shouldDownloadCovers": False,
    })
    return payload


def _require_term(value: Optional[str], label: str) -> str:
    term = (value or "").strip()
    if len(term) < MIN_TERM_LENGTH:
        raise ValidationError(f"{label} must be at least {MIN_TERM_LENGTH} characters")
    return term


def trending() -> RequestDescriptor:
    return RequestDescriptor(
        kind=QueryKind.TRENDING,
        subject=None,
        payload=_payload(hashtags=list(TRENDING_HASHTAGS)),
        cache_key="trending",
    )


def hashtag(tag: Optional[str]) -> RequestDescriptor:
    """Videos for a single hashtag. Raises ValidationError for tags under 2 chars."""
    tag = _require_term(tag, "Hashtag")
    return RequestDescriptor(
        kind=QueryKind.HASHTAG,
        subject=tag,
        payload=_payload(hashtags=[tag]),
        cache_key=f"hashtag_{tag}",
    )


def profile(username: Optional[str]) -> RequestDescriptor:
    """Videos (and author metadata) for a single profile."""
    username = _require_term(username, "Username")
    return RequestDescriptor(
        kind=QueryKind.PROFILE,
        subject=username,
        payload=_payload(profiles=[username], results_per_page=PROFILE_RESULTS_PER_PAGE),
        cache_key=f"profile_{username}",
    )


def search(query: Optional[str]) -> RequestDescriptor:
    """
    Classify a free-text query by prefix.

    "#tag" searches a hashtag, "@user" searches a profile, anything else is
    sent to the scraper as a hashtag term (there is no keyword search actor
    input).
    """
    query = (query or "").strip()
    if not query:
        raise ValidationError("Search query is required")

    if query.startswith("#"):
        tag = query[1:].strip()
        if not tag:
            raise ValidationError("Hashtag search needs a tag after '#'")
        return RequestDescriptor(
            kind=QueryKind.SEARCH_HASHTAG,
            subject=tag,
            payload=_payload(hashtags=[tag]),
            cache_key=f"search_hashtag_{tag}",
        )

    if query.startswith("@"):
        username = query[1:].strip()
        if not username:
            raise ValidationError("Profile search needs a username after '@'")
        return RequestDescriptor(
            kind=QueryKind.SEARCH_PROFILE,
            subject=username,
            payload=_payload(profiles=[username]),
            cache_key=f"search_profile_{username}",
        )

    return RequestDescriptor(
        kind=QueryKind.SEARCH_KEYWORD,
        subject=query,
        payload=_payload(hashtags=[query]),
        cache_key=f"search_keyword_{query}",
    )
