"""
Apify REST client for the TikTok scraper actor.
Runs the actor, waits for the run to finish and reads its default dataset.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from app.errors import ErrorKind
from config.settings import PLACEHOLDER_API_KEY

logger = logging.getLogger("apify_client")

DEFAULT_BASE_URL = "https://api.apify.com/v2"
DEFAULT_ACTOR_ID = "clockworks/tiktok-scraper"
WAIT_FOR_FINISH = 60  # Apify caps waitForFinish at 60 seconds
TERMINAL_STATUSES = ("SUCCEEDED", "FAILED", "ABORTED", "TIMED-OUT")

# Apify error "type" values -> kind
ERROR_TYPES = {
    "token-not-valid": ErrorKind.AUTH,
    "user-or-token-not-found": ErrorKind.AUTH,
    "insufficient-permissions": ErrorKind.AUTH,
    "unauthorized": ErrorKind.AUTH,
    "rate-limit-exceeded": ErrorKind.RATE_LIMIT,
    "too-many-requests": ErrorKind.RATE_LIMIT,
    "record-not-found": ErrorKind.NOT_FOUND,
    "page-not-found": ErrorKind.NOT_FOUND,
}

# Fallback text patterns, checked in order
MESSAGE_PATTERNS = (
    ("invalid token", ErrorKind.AUTH),
    ("unauthorized", ErrorKind.AUTH),
    ("authentication", ErrorKind.AUTH),
    ("rate limit", ErrorKind.RATE_LIMIT),
    ("too many requests", ErrorKind.RATE_LIMIT),
    ("not found", ErrorKind.NOT_FOUND),
)


class ScraperError(Exception):
    """Failure reported by the scraper client, already classified."""

    def __init__(self, kind: ErrorKind, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.status_code = status_code


@dataclass(frozen=True)
class ActorRun:
    run_id: str
    dataset_id: str
    status: str


def classify_message(message: str) -> ErrorKind:
    """Classify an opaque error text. Only used when no structured code exists."""
    text = (message or "").lower()
    for pattern, kind in MESSAGE_PATTERNS:
        if pattern in text:
            return kind
    return ErrorKind.UPSTREAM


def classify_response(response: requests.Response) -> ScraperError:
    """Build a ScraperError from a failed Apify response."""
    error_type = ""
    message = response.text[:200]
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error_type = body["error"].get("type") or ""
        message = body["error"].get("message") or message

    if error_type in ERROR_TYPES:
        kind = ERROR_TYPES[error_type]
    elif response.status_code in (401, 403):
        kind = ErrorKind.AUTH
    elif response.status_code == 429:
        kind = ErrorKind.RATE_LIMIT
    elif response.status_code == 404:
        kind = ErrorKind.NOT_FOUND
    else:
        kind = classify_message(message)

    detail = f"Apify {response.status_code}: {message}"
    return ScraperError(kind, detail, status_code=response.status_code)


class ApifyClient:
    """
    Minimal synchronous Apify client.

    Blocks the calling thread for the whole actor run; FastAPI runs the sync
    route handlers in its threadpool so other requests keep flowing.
    """

    def __init__(
        self,
        token: Optional[str],
        actor_id: str = DEFAULT_ACTOR_ID,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 90,
        run_timeout: float = 300,
        session: Optional[requests.Session] = None,
    ):
        self._token = token
        self._actor_id = actor_id.replace("/", "~")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._run_timeout = run_timeout
        self._session = session or requests.Session()

    @property
    def actor_id(self) -> str:
        return self._actor_id

    def is_configured(self) -> bool:
        """True if a real (non-placeholder) token is set."""
        return bool(self._token) and self._token != PLACEHOLDER_API_KEY

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send one request and return the decoded JSON body."""
        headers = {"Authorization": f"Bearer {self._token}"}
        try:
            response = self._session.request(
                method,
                f"{self._base_url}/{path}",
                headers=headers,
                timeout=self._timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise ScraperError(ErrorKind.UPSTREAM, f"Apify request failed: {e}") from e

        if not response.ok:
            raise classify_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise ScraperError(ErrorKind.UPSTREAM, "Apify returned invalid JSON") from e

    def call_actor(self, payload: Dict[str, Any]) -> ActorRun:
        """
        Start the actor with the given input and wait until the run ends.

        Raises:
            ScraperError: If the run cannot start or ends in any status
                other than SUCCEEDED
        """
        body = self._request(
            "POST",
            f"acts/{self._actor_id}/runs",
            params={"waitForFinish": WAIT_FOR_FINISH},
            json=payload,
        )
        run = (body or {}).get("data") or {}
        run_id = run.get("id")
        if not run_id:
            raise ScraperError(ErrorKind.UPSTREAM, "Apify did not return a run ID")
        logger.info(f"Started actor run {run_id} ({self._actor_id})")

        deadline = time.monotonic() + self._run_timeout
        while run.get("status") not in TERMINAL_STATUSES:
            if time.monotonic() >= deadline:
                raise ScraperError(
                    ErrorKind.UPSTREAM,
                    f"Actor run {run_id} did not finish within {self._run_timeout}s",
                )
            body = self._request(
                "GET",
                f"actor-runs/{run_id}",
                params={"waitForFinish": WAIT_FOR_FINISH},
            )
            run = (body or {}).get("data") or {}

        status = run.get("status")
        if status != "SUCCEEDED":
            raise ScraperError(ErrorKind.UPSTREAM, f"Actor run {run_id} ended with status: {status}")

        dataset_id = run.get("defaultDatasetId")
        if not dataset_id:
            raise ScraperError(ErrorKind.UPSTREAM, f"Actor run {run_id} has no dataset")

        return ActorRun(run_id=run_id, dataset_id=dataset_id, status=status)

    def list_items(self, dataset_id: str) -> List[Dict[str, Any]]:
        """Read every item of a dataset."""
        body = self._request(
            "GET",
            f"datasets/{dataset_id}/items",
            params={"clean": "true", "format": "json"},
        )
        return body if isinstance(body, list) else []

    def current_user(self) -> Dict[str, Any]:
        """Identity behind the token; fails with ScraperError(AUTH) for a bad token."""
        body = self._request("GET", "users/me")
        return (body or {}).get("data") or {}
