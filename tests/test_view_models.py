"""
Tests for normalizing raw scraper items into video and profile payloads.
"""
from app.view_models import (
    NO_BIO,
    NO_DESCRIPTION,
    NO_SOUND,
    ORIGINAL_SOUND,
    PLACEHOLDER_AVATAR,
    extract_hashtags,
    normalize_profile,
    normalize_videos,
)

NOW = 1710000000


def test_minimal_item_gets_defaults():
    raw = {"id": "123", "authorMeta": {"name": "alice"}, "diggCount": 50}
    [video] = normalize_videos([raw], now=NOW)
    assert video.to_dict() == {
        "id": "123",
        "creator": {"username": "alice", "avatar": PLACEHOLDER_AVATAR},
        "description": NO_DESCRIPTION,
        "soundtrack": NO_SOUND,
        "likes": 50,
        "comments": 0,
        "shares": 0,
        "plays": 0,
        "hashtags": [],
        "videoUrl": "https://www.tiktok.com/@alice/video/123",
        "createdAt": NOW,
    }


def test_full_item_is_mapped():
    raw = {
        "id": 987654321,
        "text": "hello world",
        "authorMeta": {"name": "bob", "avatar": "https://cdn/bob.jpg"},
        "musicMeta": {"musicName": "Song A"},
        "diggCount": 1, "commentCount": 2, "shareCount": 3, "playCount": 4,
        "hashtags": [{"name": "fun"}, {"name": ""}, {"name": None}, {}, "junk", {"name": "dance"}],
        "webVideoUrl": "https://www.tiktok.com/@bob/video/987654321",
        "createTime": 1700000000,
        "unexpected": {"nested": [1, 2, 3]},
    }
    [video] = normalize_videos([raw], now=NOW)
    assert video.id == "987654321"
    assert video.creator.avatar == "https://cdn/bob.jpg"
    assert video.description == "hello world"
    assert video.soundtrack == "Song A"
    assert (video.likes, video.comments, video.shares, video.plays) == (1, 2, 3, 4)
    assert video.hashtags == ["fun", "dance"]
    assert video.video_url == raw["webVideoUrl"]
    assert video.created_at == 1700000000


def test_original_sound_fallback():
    [video] = normalize_videos([{"id": "1", "musicMeta": {"musicOriginal": True}}], now=NOW)
    assert video.soundtrack == ORIGINAL_SOUND


def test_nickname_and_unknown_username():
    [nick, anon] = normalize_videos(
        [{"id": "1", "authorMeta": {"nickName": "Nick"}}, {"id": "2", "authorMeta": None}],
        now=NOW,
    )
    assert nick.creator.username == "Nick"
    assert anon.creator.username == "unknown"
    assert anon.video_url == "https://www.tiktok.com/@unknown/video/2"


def test_items_without_id_are_dropped():
    raw = [
        {"id": "1"}, {"text": "no id"}, {"id": ""}, {"id": "   "}, {"id": None},
        {"id": False}, {"id": True}, {"id": 0}, {"id": []}, {"id": {}}, {"id": 1.5},
        None, "string", 42, {"id": "2"}, {"id": 7},
    ]
    videos = normalize_videos(raw, now=NOW)
    assert [video.id for video in videos] == ["1", "2", "7"]
    assert len(videos) <= len(raw)


def test_bad_counters_degrade_to_zero():
    raw = {"id": "1", "diggCount": "lots", "commentCount": -5, "shareCount": "12", "playCount": 3.7}
    [video] = normalize_videos([raw], now=NOW)
    assert (video.likes, video.comments, video.shares, video.plays) == (0, 0, 12, 3)


def test_non_sequence_inputs_return_empty():
    assert normalize_videos(None) == []
    assert normalize_videos([]) == []
    assert normalize_videos({"id": "1"}) == []
    assert normalize_videos("abc") == []
    assert normalize_videos(5) == []


def test_normalization_is_idempotent():
    raw = [{"id": "1", "authorMeta": {"name": "a"}}, {"id": "2", "hashtags": [{"name": "x"}]}]
    first = [video.to_dict() for video in normalize_videos(raw, now=NOW)]
    second = [video.to_dict() for video in normalize_videos(raw, now=NOW)]
    assert first == second
    assert raw == [{"id": "1", "authorMeta": {"name": "a"}}, {"id": "2", "hashtags": [{"name": "x"}]}]


def test_extract_hashtags_tolerates_garbage():
    assert extract_hashtags(None) == []
    assert extract_hashtags("tag") == []
    assert extract_hashtags([{"name": "a"}, {"title": "b"}]) == ["a"]


def test_profile_absent_for_missing_meta():
    assert normalize_profile(None) is None
    assert normalize_profile("alice") is None


def test_profile_mapping_with_legacy_fields():
    profile = normalize_profile({
        "name": "alice",
        "signature": "hi",
        "followerCount": 100,
        "followingCount": 5,
        "diggCount": 7,
        "verified": True,
    })
    assert profile.to_dict() == {
        "username": "alice",
        "bio": "hi",
        "followers": 100,
        "following": 5,
        "likes": 7,
        "avatar": PLACEHOLDER_AVATAR,
        "verified": True,
        "private": False,
    }


def test_profile_prefers_first_present_field():
    profile = normalize_profile({"followers": 0, "followerCount": 100, "heart": 9, "diggCount": 1})
    assert profile.followers == 0
    assert profile.likes == 9
    assert profile.username == "unknown"
    assert profile.bio == NO_BIO


def test_private_flag():
    assert normalize_profile({"name": "x", "privateAccount": True}).private is True
