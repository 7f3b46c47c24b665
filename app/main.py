"""
TokView - Main FastAPI Application
Proxies TikTok content requests to the Apify TikTok scraper and serves the
pages that render them.
"""
import html
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.errors import ErrorKind, TokViewError
from app.service import TikTokService, get_service
from app.view_models import videos_to_dicts
from config.settings import settings

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger("tokview")

# Version tracking
APP_VERSION = "v1.0.0"
APP_NAME = "TokView Pro"

BASE_DIR = Path(__file__).parent
TEMPLATE_DIR = BASE_DIR / "templates"

# Caller-facing status code per error kind
STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFIGURATION: 503,
    ErrorKind.AUTH: 502,
    ErrorKind.RATE_LIMIT: 429,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UPSTREAM: 502,
}

# Friendly message per error kind, shown by the browser script
FRIENDLY_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "Please check your input and try again.",
    ErrorKind.CONFIGURATION: "The TikTok data service is not configured yet.",
    ErrorKind.AUTH: "The TikTok data service rejected our credentials.",
    ErrorKind.RATE_LIMIT: "Too many requests right now. Please try again in a minute.",
    ErrorKind.NOT_FOUND: "Nothing found. The account may be private or have no public videos.",
    ErrorKind.UPSTREAM: "TikTok data is temporarily unavailable. Please try again later.",
}

app = FastAPI(
    title=APP_NAME,
    description="Trending, hashtag, profile and search feeds from TikTok via Apify",
    version=APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/static", StaticFiles(directory=BASE_DIR / "static"), name="static")


def render_page(template: str, status_code: int = 200, **context: Any) -> HTMLResponse:
    """Fill __KEY__ placeholders in a template with escaped values."""
    template_path = TEMPLATE_DIR / template
    if not template_path.exists():
        return HTMLResponse(content=f"<h1>{template} template not found</h1>", status_code=500)
    content = template_path.read_text(encoding="utf-8")
    for key, value in context.items():
        content = content.replace(f"__{key.upper()}__", html.escape(str(value), quote=True))
    return HTMLResponse(content=content, status_code=status_code)


# ===== ERROR HANDLERS =====

@app.exception_handler(TokViewError)
def tokview_error_handler(request: Request, exc: TokViewError):
    status_code = STATUS_CODES.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"{request.url.path} failed ({exc.kind.value}): {exc.detail or exc.message}")
    else:
        logger.info(f"{request.url.path} -> {status_code} ({exc.kind.value})")
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": exc.message,
            "kind": exc.kind.value,
            "message": FRIENDLY_MESSAGES.get(exc.kind, exc.message),
        },
    )


@app.exception_handler(StarletteHTTPException)
def http_error_handler(request: Request, exc: StarletteHTTPException):
    if request.url.path.startswith("/api"):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail)},
        )
    if exc.status_code == 404:
        return render_page(
            "error.html",
            status_code=404,
            title=f"Page Not Found - {APP_NAME}",
            message="The page you are looking for does not exist.",
        )
    return render_page(
        "error.html",
        status_code=exc.status_code,
        title=f"Error - {APP_NAME}",
        message=str(exc.detail),
    )


# ===== HEALTH & CACHE =====

@app.get("/api/health")
def health_check(service: TikTokService = Depends(get_service)):
    """Health check endpoint."""
    status = service.cache_status()
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "apiKeyConfigured": status["isConfigured"],
        "cacheSize": status["size"],
    }


@app.get("/api/health/apify")
def apify_health(service: TikTokService = Depends(get_service)):
    """Verify the Apify token against the account endpoint."""
    user = service.verify_credentials()
    return {"success": True, "user": user}


@app.get("/api/cache/stats")
def cache_stats(service: TikTokService = Depends(get_service)):
    """Get cache statistics."""
    return service.gateway.cache.get_stats()


@app.delete("/api/cache")
def clear_cache(service: TikTokService = Depends(get_service)):
    """Clear the scraper cache (development helper)."""
    previous_size = service.clear_cache()
    return {
        "success": True,
        "message": f"Cache cleared ({previous_size} items removed)",
        "cleared": previous_size,
    }


# ===== CONTENT API =====

@app.get("/api/trending")
def api_trending(service: TikTokService = Depends(get_service)):
    """Trending videos (#foryou, #viral, #trending)."""
    result = service.trending()
    return {
        "success": True,
        "data": videos_to_dicts(result.videos),
        "count": result.count,
    }


@app.get("/api/hashtag/{tag}")
def api_hashtag(tag: str, service: TikTokService = Depends(get_service)):
    """Videos for one hashtag."""
    result = service.by_hashtag(tag)
    return {
        "success": True,
        "data": videos_to_dicts(result.videos),
        "hashtag": tag,
        "count": result.count,
    }


@app.get("/api/profile/{username}")
def api_profile(username: str, service: TikTokService = Depends(get_service)):
    """Profile metadata plus recent videos."""
    result = service.by_profile(username)
    return {
        "success": True,
        "profile": result.profile.to_dict() if result.profile else None,
        "videos": videos_to_dicts(result.videos),
        "videoCount": result.count,
        "count": result.count,
    }


@app.get("/api/search")
def api_search(
    q: str = Query(default="", description="#hashtag, @username or free text"),
    service: TikTokService = Depends(get_service),
):
    """Search by hashtag, username or keyword."""
    result = service.search(q)
    return {
        "success": True,
        "data": videos_to_dicts(result.videos),
        "profile": result.profile.to_dict() if result.profile else None,
        "query": q.strip(),
        "count": result.count,
    }


# ===== PAGES =====
# Page shells only: the browser script fetches the feed from /api.

@app.get("/", response_class=HTMLResponse)
def home():
    return render_page(
        "page.html",
        title=f"{APP_NAME} - Streamline Your TikTok Viewing",
        page="home",
        heading="Discover TikTok without the app",
        param="",
    )


@app.get("/trending", response_class=HTMLResponse)
def trending_page():
    return render_page(
        "page.html",
        title=f"Trending Videos - {APP_NAME}",
        page="trending",
        heading="Trending now",
        param="",
    )


@app.get("/hashtag/{tag}", response_class=HTMLResponse)
def hashtag_page(tag: str):
    return render_page(
        "page.html",
        title=f"#{tag} - {APP_NAME}",
        page="hashtag",
        heading=f"#{tag}",
        param=tag,
    )


@app.get("/profile/{username}", response_class=HTMLResponse)
def profile_page(username: str):
    return render_page(
        "page.html",
        title=f"@{username} - {APP_NAME}",
        page="profile",
        heading=f"@{username}",
        param=username,
    )


@app.get("/search", response_class=HTMLResponse)
def search_page(q: str = Query(default="")):
    return render_page(
        "page.html",
        title=f'Search "{q}" - {APP_NAME}',
        page="search",
        heading=f'Results for "{q}"' if q else "Search",
        param=q,
    )
