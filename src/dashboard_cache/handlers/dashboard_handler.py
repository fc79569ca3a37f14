"""HTTP handlers for dashboard queries.

Handlers convert between observers/entities and DTOs (API contracts).
They handle HTTP concerns like status codes and error responses.
"""

from fastapi import HTTPException, status
from pydantic_core import to_jsonable_python

from dashboard_cache.dto import (
    CacheStatsResponse,
    DashboardOverviewResponse,
    HealthCheckResponse,
    InvalidateCacheResultResponse,
    NotificationItem,
    PrefetchResponse,
    QueryStateResponse,
)
from dashboard_cache.protocols import NotificationFeed
from dashboard_cache.query_client import QueryObserver
from dashboard_cache.services import DashboardService


class DashboardHandler:
    """HTTP handlers for dashboard operations.

    Each read mounts an observer for the duration of the request. Without
    cached data it waits for the first fetch; with cached data it answers
    at once, and a stale entry keeps refreshing in the background.

    Example:
        ```python
        handler = DashboardHandler(dashboard_service=service)

        @app.get("/dashboard/stats", response_model=QueryStateResponse)
        async def get_stats():
            return await handler.get_stats()
        ```
    """

    def __init__(self, dashboard_service: DashboardService) -> None:
        """Initialize the dashboard handler.

        Args:
            dashboard_service: The service holding the query definitions (required).
        """
        self._dashboard = dashboard_service

    async def get_stats(self) -> QueryStateResponse:
        return await self._read(self._dashboard.get_stats())

    async def get_recent_projects(self, limit: int) -> QueryStateResponse:
        return await self._read(self._dashboard.get_recent_projects(limit))

    async def get_priority_issues(self, limit: int) -> QueryStateResponse:
        return await self._read(self._dashboard.get_priority_issues(limit))

    async def get_performance_trends(self, days: int) -> QueryStateResponse:
        return await self._read(self._dashboard.get_performance_trends(days))

    async def get_issue_trends(self, days: int) -> QueryStateResponse:
        return await self._read(self._dashboard.get_issue_trends(days))

    async def get_project_distribution(self) -> QueryStateResponse:
        return await self._read(self._dashboard.get_project_distribution())

    async def get_analysis_history(self, page: int, page_size: int) -> QueryStateResponse:
        return await self._read(self._dashboard.get_analysis_history(page, page_size))

    async def get_overview(self) -> DashboardOverviewResponse:
        """Handle GET /dashboard/overview requests."""
        with self._dashboard.get_overview() as overview:
            if overview.is_loading:
                await overview.settled()
            return DashboardOverviewResponse(
                stats=to_jsonable_python(overview.stats, by_alias=True),
                recent_projects=to_jsonable_python(overview.recent_projects, by_alias=True),
                priority_issues=to_jsonable_python(overview.priority_issues, by_alias=True),
                performance_trends=to_jsonable_python(overview.performance_trends, by_alias=True),
                is_loading=overview.is_loading,
                is_error=overview.is_error,
                error=overview.error_message,
                last_updated=overview.last_updated_at,
                is_stale=overview.is_stale,
            )

    async def prefetch(self) -> PrefetchResponse:
        """Describe the prefetch that POST /dashboard/prefetch schedules."""
        return PrefetchResponse(
            scheduled=True,
            keys=[list(key) for key in self._dashboard.prefetch_keys()],
        )

    async def invalidate_cache(self) -> InvalidateCacheResultResponse:
        """Handle POST /dashboard/invalidate-cache requests.

        Raises:
            HTTPException: 502 if the backend refused or could not be reached
        """
        result = await self._dashboard.invalidate_cache()
        if result.is_error:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Failed to clear cache: {result.error_message}",
            )

        return InvalidateCacheResultResponse(
            success=True,
            message=result.data.message or "Dashboard data has been refreshed",
        )

    async def get_notifications(self) -> list[NotificationItem]:
        """Handle GET /dashboard/notifications requests.

        Notifiers that keep no history yield an empty list.
        """
        notifier = self._dashboard.notifier
        if not isinstance(notifier, NotificationFeed):
            return []
        return [
            NotificationItem(
                title=notification.title,
                description=notification.description,
                variant=notification.variant,
                created_at=notification.created_at,
            )
            for notification in notifier.notifications
        ]

    async def get_cache_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests.

        Raises:
            HTTPException: If an error occurs while collecting stats
        """
        try:
            stats = self._dashboard.get_cache_stats()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

        return CacheStatsResponse(
            total_queries=stats.total_queries,
            fresh_queries=stats.fresh_queries,
            stale_queries=stats.stale_queries,
            error_queries=stats.error_queries,
            loading_queries=stats.loading_queries,
            cache_size=stats.cache_size,
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = await self._dashboard.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            backend_healthy=is_healthy,
            cached_queries=len(self._dashboard.client),
        )

    async def _read(self, observer: QueryObserver) -> QueryStateResponse:
        with observer:
            result = observer.result
            if not result.has_data:
                result = await observer.settled()

        return QueryStateResponse(
            key=list(result.key),
            data=to_jsonable_python(result.data, by_alias=True),
            status=result.status,
            is_loading=result.is_loading,
            is_fetching=result.is_fetching,
            is_error=result.is_error,
            error=result.error_message,
            is_stale=result.is_stale,
            is_placeholder_data=result.is_placeholder_data,
            data_updated_at=result.data_updated_at,
        )
