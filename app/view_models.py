"""
View Models for API responses
Strict mapping layer that converts raw scraper items into stable payloads.
Never raises: missing or malformed fields fall back to fixed defaults.
"""
import time
from typing import Dict, Any, List, Optional, Iterable
from dataclasses import dataclass, field

from app.utils.helpers import first_present, safe_count, safe_dict, safe_str


# =============================================================================
# DEFAULTS
# =============================================================================

PLACEHOLDER_AVATAR = "https://via.placeholder.com/150/1a1a1a/ffffff?text=TK"
UNKNOWN_USERNAME = "unknown"
NO_DESCRIPTION = "No description available"
NO_BIO = "No bio available"
ORIGINAL_SOUND = "Original Sound"
NO_SOUND = "No sound information"


# =============================================================================
# PAYLOAD CONTRACTS
# =============================================================================
# The JSON API and the browser script only ever see these shapes, never raw
# scraper items.


@dataclass
class CreatorPayload:
    username: str
    avatar: str

    def to_dict(self) -> Dict[str, Any]:
        return {"username": self.username, "avatar": self.avatar}


@dataclass
class VideoPayload:
    """Normalized video. `id` is always a non-empty string."""
    id: str
    creator: CreatorPayload
    description: str
    soundtrack: str
    likes: int = 0
    comments: int = 0
    shares: int = 0
    plays: int = 0
    hashtags: List[str] = field(default_factory=list)
    video_url: str = ""
    created_at: int = 0  # unix seconds

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], now: Optional[int] = None) -> Optional["VideoPayload"]:
        """Map one raw item; returns None when the item has no id."""
        if not isinstance(raw, dict):
            return None
        video_id = extract_video_id(raw.get("id"))
        if video_id is None:
            return None

        author = safe_dict(raw.get("authorMeta"))
        username = safe_str(author.get("name")) or safe_str(author.get("nickName"), UNKNOWN_USERNAME)

        music = safe_dict(raw.get("musicMeta"))
        soundtrack = safe_str(music.get("musicName"))
        if not soundtrack:
            soundtrack = ORIGINAL_SOUND if music.get("musicOriginal") else NO_SOUND

        created_at = safe_count(raw.get("createTime"))
        if not created_at:
            created_at = int(time.time()) if now is None else now

        return cls(
            id=video_id,
            creator=CreatorPayload(
                username=username,
                avatar=safe_str(author.get("avatar"), PLACEHOLDER_AVATAR),
            ),
            description=safe_str(raw.get("text"), NO_DESCRIPTION),
            soundtrack=soundtrack,
            likes=safe_count(raw.get("diggCount")),
            comments=safe_count(raw.get("commentCount")),
            shares=safe_count(raw.get("shareCount")),
            plays=safe_count(raw.get("playCount")),
            hashtags=extract_hashtags(raw.get("hashtags")),
            video_url=safe_str(
                raw.get("webVideoUrl"),
                f"https://www.tiktok.com/@{username}/video/{video_id}",
            ),
            created_at=created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "id": self.id,
            "creator": self.creator.to_dict(),
            "description": self.description,
            "soundtrack": self.soundtrack,
            "likes": self.likes,
            "comments": self.comments,
            "shares": self.shares,
            "plays": self.plays,
            "hashtags": list(self.hashtags),
            "videoUrl": self.video_url,
            "createdAt": self.created_at,
        }


@dataclass
class ProfilePayload:
    username: str
    bio: str
    followers: int
    following: int
    likes: int
    avatar: str
    verified: bool
    private: bool

    @classmethod
    def from_author_meta(cls, author_meta: Any) -> Optional["ProfilePayload"]:
        if not isinstance(author_meta, dict):
            return None
        return cls(
            username=safe_str(author_meta.get("name")) or safe_str(author_meta.get("nickName"), UNKNOWN_USERNAME),
            bio=safe_str(author_meta.get("signature"), NO_BIO),
            # Two legacy field names each; the first present one wins
            followers=safe_count(first_present(author_meta, "followers", "followerCount")),
            following=safe_count(first_present(author_meta, "following", "followingCount")),
            likes=safe_count(first_present(author_meta, "heart", "diggCount")),
            avatar=safe_str(author_meta.get("avatar"), PLACEHOLDER_AVATAR),
            verified=bool(author_meta.get("verified")),
            private=bool(author_meta.get("privateAccount")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "bio": self.bio,
            "followers": self.followers,
            "following": self.following,
            "likes": self.likes,
            "avatar": self.avatar,
            "verified": self.verified,
            "private": self.private,
        }


# =============================================================================
# MAPPERS
# =============================================================================

def extract_video_id(raw_id: Any) -> Optional[str]:
    """
    Id as a string, or None when the item has no identifiable id.

    Only non-empty strings and non-zero integers count; 0, booleans and
    containers are treated as missing.
    """
    if isinstance(raw_id, bool):
        return None
    if isinstance(raw_id, int):
        return str(raw_id) if raw_id != 0 else None
    if isinstance(raw_id, str):
        return raw_id.strip() or None
    return None


def extract_hashtags(raw_hashtags: Any) -> List[str]:
    """Names of the item's hashtags, empty names dropped."""
    if not isinstance(raw_hashtags, list):
        return []
    names = []
    for tag in raw_hashtags:
        name = safe_dict(tag).get("name")
        if name:
            names.append(str(name))
    return names


def normalize_videos(raw_items: Optional[Iterable[Any]], now: Optional[int] = None) -> List[VideoPayload]:
    """
    Normalize raw scraper items into videos.

    Items without an id are dropped, so the output is never longer than the
    input. Pass `now` to pin the createdAt fallback.
    """
    if not raw_items or isinstance(raw_items, (str, bytes, dict)):
        return []
    try:
        items = list(raw_items)
    except TypeError:
        return []
    if now is None:
        now = int(time.time())
    videos = []
    for raw in items:
        video = VideoPayload.from_raw(raw, now=now)
        if video is not None:
            videos.append(video)
    return videos


def normalize_profile(author_meta: Any) -> Optional[ProfilePayload]:
    """Profile from a raw `authorMeta` block, or None when there is none."""
    return ProfilePayload.from_author_meta(author_meta)


def videos_to_dicts(videos: List[VideoPayload]) -> List[Dict[str, Any]]:
    return [video.to_dict() for video in videos]
