"""Configuration management using pydantic-settings."""
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Export .env values to os.environ before Settings() reads them
load_dotenv(".env")

PLACEHOLDER_API_KEY = "your_actual_apify_api_key_here"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Apify configuration
    apify_api_key: Optional[str] = None
    apify_actor_id: str = "clockworks/tiktok-scraper"
    apify_base_url: str = "https://api.apify.com/v2"
    apify_run_timeout_seconds: int = 300
    request_timeout_seconds: int = 90

    # Cache settings
    cache_ttl_seconds: int = 300  # 5 minutes
    cache_coalesce_requests: bool = False

    # Server settings
    environment: str = "development"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
