"""Response DTOs for the dashboard API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class QueryStateResponse(BaseModel):
    """Cache-aware view of one dashboard query."""

    key: list[str | int] = Field(..., description="The query key of the cache entry")
    data: Any = Field(None, description="Cached data, the placeholder, or null")
    status: str = Field(..., description="Query status: 'pending', 'success' or 'error'")
    is_loading: bool = Field(..., description="Whether the first fetch is still running")
    is_fetching: bool = Field(..., description="Whether any fetch is running")
    is_error: bool = Field(..., description="Whether the last fetch failed")
    error: str | None = Field(None, description="Message of the last fetch error")
    is_stale: bool = Field(..., description="Whether the data is past its staleness window")
    is_placeholder_data: bool = Field(False, description="Whether data is the placeholder")
    data_updated_at: float = Field(..., description="Unix timestamp of the last successful fetch (0 = never)")


class DashboardOverviewResponse(BaseModel):
    """Aggregated dashboard view (stats, projects, issues, trends)."""

    stats: Any = Field(None, description="Dashboard statistics")
    recent_projects: Any = Field(None, description="Most recently analysed projects")
    priority_issues: Any = Field(None, description="Highest priority issues")
    performance_trends: Any = Field(None, description="Performance trend series")
    is_loading: bool = Field(..., description="Whether any constituent query is loading")
    is_error: bool = Field(..., description="Whether any constituent query failed")
    error: str | None = Field(None, description="First error by precedence: stats, projects, issues")
    last_updated: float | None = Field(None, description="Most recent fetch time (Unix timestamp)")
    is_stale: bool = Field(..., description="Whether any constituent query is stale")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    total_queries: int = Field(..., description="Number of cache entries", ge=0)
    fresh_queries: int = Field(..., description="Entries inside their staleness window", ge=0)
    stale_queries: int = Field(..., description="Entries past their staleness window", ge=0)
    error_queries: int = Field(..., description="Entries whose last fetch failed", ge=0)
    loading_queries: int = Field(..., description="Entries without data yet", ge=0)
    cache_size: int = Field(..., description="Size of cached data as JSON, in bytes", ge=0)


class NotificationItem(BaseModel):
    """A user-visible notification."""

    title: str
    description: str = ""
    variant: str = "default"
    created_at: float


class InvalidateCacheResultResponse(BaseModel):
    """Response DTO for the cache invalidation mutation."""

    success: bool = Field(..., description="Whether the backend accepted the invalidation")
    message: str = Field(..., description="Human-readable status message")


class PrefetchResponse(BaseModel):
    """Response DTO for a scheduled prefetch."""

    scheduled: bool
    keys: list[list[str | int]] = Field(default_factory=list, description="Keys being warmed")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    backend_healthy: bool = Field(..., description="Whether the dashboard backend is reachable")
    cached_queries: int = Field(0, description="Number of cache entries", ge=0)
