import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import httpx
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Backend API
    api_base_url: str = os.getenv("DASHBOARD_API_URL", "http://localhost:8000/api")
    api_token: str | None = os.getenv("DASHBOARD_API_TOKEN")
    api_timeout: float = float(os.getenv("DASHBOARD_API_TIMEOUT", "30"))

    # Query defaults (seconds)
    query_stale_time: float = float(os.getenv("QUERY_STALE_TIME", "30"))
    query_gc_time: float = float(os.getenv("QUERY_GC_TIME", "600"))  # 10 minutes
    query_retry: int = int(os.getenv("QUERY_RETRY", "2"))
    query_retry_max_delay: float = float(os.getenv("QUERY_RETRY_MAX_DELAY", "30"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8080"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.api_timeout <= 0:
            raise ValueError("DASHBOARD_API_TIMEOUT must be positive")

        if self.query_stale_time < 0 or self.query_gc_time < 0:
            raise ValueError("QUERY_STALE_TIME and QUERY_GC_TIME must not be negative")

        if self.query_retry < 0:
            raise ValueError(f"QUERY_RETRY must not be negative, got {self.query_retry}")

        if self.log_level.upper() not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL is not a known logging level: {self.log_level}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_http_client(
    base_url: str | None = None,
    token: str | None = None,
    timeout: float | None = None,
) -> httpx.AsyncClient:
    """Create an async HTTP client for the dashboard backend."""
    headers = {"Content-Type": "application/json"}
    token = token or settings.api_token
    if token:
        headers["Authorization"] = f"Bearer {token}"

    return httpx.AsyncClient(
        base_url=base_url or settings.api_base_url,
        headers=headers,
        timeout=timeout or settings.api_timeout,
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the application."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
