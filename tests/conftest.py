"""
Shared fixtures: a fake Apify client, a controllable clock and a wired service.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.apify_client import ActorRun
from app.cache import CacheManager
from app.gateway import FetchGateway
from app.service import TikTokService


class FakeClock:
    """Manually advanced clock for cache freshness tests."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeScraper:
    """Records actor calls and returns canned dataset items."""

    def __init__(self, items=None, error=None, configured=True):
        self.items = items if items is not None else []
        self.error = error
        self.configured = configured
        self.calls = []

    def is_configured(self) -> bool:
        return self.configured

    def call_actor(self, payload):
        self.calls.append(payload)
        if self.error is not None:
            raise self.error
        return ActorRun(run_id=f"run{len(self.calls)}", dataset_id=f"ds{len(self.calls)}", status="SUCCEEDED")

    def list_items(self, dataset_id):
        return list(self.items)

    def current_user(self):
        if self.error is not None:
            raise self.error
        return {"id": "u1", "username": "tester"}


def make_item(video_id="123", username="alice", **extra):
    item = {
        "id": video_id,
        "text": f"video {video_id}",
        "authorMeta": {"name": username, "avatar": f"https://cdn.example/{username}.jpg"},
        "diggCount": 10,
        "createTime": 1700000000,
    }
    item.update(extra)
    return item


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scraper():
    return FakeScraper(items=[make_item("1"), make_item("2")])


@pytest.fixture
def cache(clock):
    return CacheManager(ttl_seconds=300, clock=clock)


@pytest.fixture
def gateway(scraper, cache):
    return FetchGateway(scraper, cache)


@pytest.fixture
def service(gateway):
    return TikTokService(gateway)
