"""
Tests for the JSON API routes and pages.
"""
import pytest
from fastapi.testclient import TestClient

from app.apify_client import ScraperError
from app.errors import ErrorKind
from app.main import app
from app.service import get_service

from conftest import FakeScraper, make_item


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_endpoint(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["apiKeyConfigured"] is True
    assert data["cacheSize"] == 0


def test_trending_returns_videos(client):
    response = client.get("/api/trending")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["count"] == 2
    assert data["data"][0]["id"] == "1"
    assert data["data"][0]["creator"]["username"] == "alice"


def test_hashtag_route(client, scraper):
    response = client.get("/api/hashtag/dance")
    assert response.status_code == 200
    assert response.json()["hashtag"] == "dance"
    assert scraper.calls[0]["hashtags"] == ["dance"]


def test_short_hashtag_is_400(client, scraper):
    response = client.get("/api/hashtag/a")
    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["kind"] == "validation"
    assert "at least 2 characters" in data["error"]
    assert scraper.calls == []


def test_profile_route(client, scraper):
    scraper.items = [make_item("1", username="alice")]
    response = client.get("/api/profile/alice")
    assert response.status_code == 200
    data = response.json()
    assert data["profile"]["username"] == "alice"
    assert data["videoCount"] == 1
    assert data["videos"][0]["id"] == "1"


def test_profile_not_found_is_404(client, scraper):
    scraper.items = []
    response = client.get("/api/profile/ghost")
    assert response.status_code == 404
    assert "@ghost" in response.json()["error"]


def test_search_route(client, scraper):
    response = client.get("/api/search", params={"q": " #fun "})
    assert response.status_code == 200
    assert response.json()["query"] == "#fun"
    assert scraper.calls[0]["hashtags"] == ["fun"]


def test_search_requires_query(client):
    response = client.get("/api/search")
    assert response.status_code == 400
    assert response.json()["error"] == "Search query is required"


@pytest.mark.parametrize("kind, status", [
    (ErrorKind.AUTH, 502),
    (ErrorKind.RATE_LIMIT, 429),
    (ErrorKind.UPSTREAM, 502),
])
def test_upstream_failures_map_to_status(client, scraper, kind, status):
    scraper.error = ScraperError(kind, "nope")
    response = client.get("/api/trending")
    assert response.status_code == status
    assert response.json()["kind"] == kind.value


def test_unconfigured_is_503(client, scraper):
    scraper.configured = False
    response = client.get("/api/trending")
    assert response.status_code == 503
    assert response.json()["kind"] == "configuration"


def test_clear_cache_route(client):
    client.get("/api/trending")
    client.get("/api/hashtag/dance")
    response = client.delete("/api/cache")
    assert response.status_code == 200
    assert response.json()["message"] == "Cache cleared (2 items removed)"
    assert client.get("/api/health").json()["cacheSize"] == 0


def test_cache_stats_route(client):
    client.get("/api/trending")
    client.get("/api/trending")
    stats = client.get("/api/cache/stats").json()
    assert stats["entries"] == 1
    assert stats["hits"] == 1


def test_apify_health_route(client):
    response = client.get("/api/health/apify")
    assert response.status_code == 200
    assert response.json()["user"]["username"] == "tester"


@pytest.mark.parametrize("path", ["/", "/trending", "/hashtag/dance", "/profile/alice", "/search?q=cats"])
def test_pages_return_html(client, path):
    response = client.get(path)
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "/static/js/app.js" in response.text


def test_page_escapes_params(client):
    response = client.get("/search", params={"q": "<script>alert(1)</script>"})
    assert "<script>alert(1)</script>" not in response.text
    assert "&lt;script&gt;" in response.text


def test_unknown_page_is_html_404(client):
    response = client.get("/does/not/exist")
    assert response.status_code == 404
    assert "text/html" in response.headers["content-type"]


def test_unknown_api_route_is_json_404(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_static_script_served(client):
    response = client.get("/static/js/app.js")
    assert response.status_code == 200
    assert "APIService" in response.text
