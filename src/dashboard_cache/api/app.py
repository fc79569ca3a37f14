from typing import Any

from fastapi import APIRouter, BackgroundTasks, FastAPI, Query, status
from fastapi.middleware.cors import CORSMiddleware

from dashboard_cache.api.dependencies import HandlerDep, ServiceDep, lifespan
from dashboard_cache.config import settings
from dashboard_cache.dto import (
    CacheStatsResponse,
    DashboardOverviewResponse,
    HealthCheckResponse,
    InvalidateCacheResultResponse,
    NotificationItem,
    PrefetchResponse,
    QueryStateResponse,
)
from dashboard_cache.notifications import InMemoryNotifier
from dashboard_cache.protocols import DashboardSource, Notifier
from dashboard_cache.query_client import QueryClient

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Dashboard Cache API",
        "version": "0.1.0",
        "description": "Cached dashboard data for the SEO analysis frontend",
        "endpoints": {
            "dashboard": "/dashboard",
            "cache": "/cache/stats",
            "health": "/health",
            "docs": "/docs",
        },
    }


@router.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@router.get("/dashboard/stats", response_model=QueryStateResponse)
async def get_stats(handler: HandlerDep) -> QueryStateResponse:
    """Get dashboard statistics."""
    return await handler.get_stats()


@router.get("/dashboard/recent-projects", response_model=QueryStateResponse)
async def get_recent_projects(
    handler: HandlerDep,
    limit: int = Query(5, ge=1, le=100),
) -> QueryStateResponse:
    """Get the most recently analysed projects."""
    return await handler.get_recent_projects(limit)


@router.get("/dashboard/priority-issues", response_model=QueryStateResponse)
async def get_priority_issues(
    handler: HandlerDep,
    limit: int = Query(10, ge=1, le=100),
) -> QueryStateResponse:
    """Get the highest priority issues across all projects."""
    return await handler.get_priority_issues(limit)


@router.get("/dashboard/performance-trends", response_model=QueryStateResponse)
async def get_performance_trends(
    handler: HandlerDep,
    days: int = Query(30, ge=1, le=365),
) -> QueryStateResponse:
    """Get the performance trend series."""
    return await handler.get_performance_trends(days)


@router.get("/dashboard/issue-trends", response_model=QueryStateResponse)
async def get_issue_trends(
    handler: HandlerDep,
    days: int = Query(30, ge=1, le=365),
) -> QueryStateResponse:
    """Get the issue trend series."""
    return await handler.get_issue_trends(days)


@router.get("/dashboard/project-distribution", response_model=QueryStateResponse)
async def get_project_distribution(handler: HandlerDep) -> QueryStateResponse:
    """Get project counts by score range and category."""
    return await handler.get_project_distribution()


@router.get("/dashboard/analysis-history", response_model=QueryStateResponse)
async def get_analysis_history(
    handler: HandlerDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, alias="pageSize", ge=1, le=100),
) -> QueryStateResponse:
    """Get one page of analysis history."""
    return await handler.get_analysis_history(page, page_size)


@router.get("/dashboard/overview", response_model=DashboardOverviewResponse)
async def get_overview(handler: HandlerDep) -> DashboardOverviewResponse:
    """Get stats, projects, issues and trends with one combined state."""
    return await handler.get_overview()


@router.post(
    "/dashboard/prefetch",
    response_model=PrefetchResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def prefetch(
    handler: HandlerDep,
    service: ServiceDep,
    background_tasks: BackgroundTasks,
) -> PrefetchResponse:
    """Warm the cache in the background for the dashboard landing view."""
    background_tasks.add_task(service.prefetch_all)
    return await handler.prefetch()


@router.post("/dashboard/invalidate-cache", response_model=InvalidateCacheResultResponse)
async def invalidate_cache(handler: HandlerDep) -> InvalidateCacheResultResponse:
    """Clear the backend cache and invalidate every cached dashboard query."""
    return await handler.invalidate_cache()


@router.get("/dashboard/notifications", response_model=list[NotificationItem])
async def get_notifications(handler: HandlerDep) -> list[NotificationItem]:
    """Get recent user notifications."""
    return await handler.get_notifications()


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get query cache statistics."""
    return await handler.get_cache_stats()


def create_app(
    source: DashboardSource | None = None,
    notifier: Notifier | None = None,
    query_client: QueryClient | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        source: Dashboard data source. If None, the HTTP backend from settings.
        notifier: Notification sink. If None, an in-memory feed.
        query_client: The query cache. If None, a new one.

    Returns:
        The FastAPI application
    """
    app = FastAPI(
        title="Dashboard Cache API",
        description="Cached dashboard data for the SEO analysis frontend",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.dashboard_source = source
    app.state.notifier = notifier or InMemoryNotifier()
    app.state.query_client = query_client

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "dashboard_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
