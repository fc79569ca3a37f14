"""Dashboard data source protocol.

Defines the interface for the backend that owns the dashboard data.
Every method performs exactly one remote call and raises on failure;
caching and retries are the query client's job, not the source's.

Implementations can include:
- The REST backend over HTTP (default)
- An in-memory fake for tests and demos
"""

from typing import Protocol, runtime_checkable

from dashboard_cache.dto import (
    AnalysisHistoryPage,
    DashboardStats,
    InvalidateCacheResponse,
    IssueTrendPoint,
    PerformanceTrendPoint,
    PriorityIssue,
    ProjectDistribution,
    RecentProject,
)


@runtime_checkable
class DashboardSource(Protocol):
    """Protocol for dashboard backends.

    Similar to Go's interface pattern - any type that implements these
    methods satisfies the protocol, no explicit inheritance needed.
    """

    async def get_stats(self) -> DashboardStats:
        """Fetch aggregate dashboard statistics."""
        ...

    async def get_recent_projects(self, limit: int) -> list[RecentProject]:
        """Fetch the most recently analysed projects.

        Args:
            limit: Maximum number of projects to return
        """
        ...

    async def get_priority_issues(self, limit: int) -> list[PriorityIssue]:
        """Fetch the highest priority issues across all projects.

        Args:
            limit: Maximum number of issues to return
        """
        ...

    async def get_performance_trends(self, days: int) -> list[PerformanceTrendPoint]:
        """Fetch daily score series for the last ``days`` days."""
        ...

    async def get_issue_trends(self, days: int) -> list[IssueTrendPoint]:
        """Fetch daily issue counts for the last ``days`` days."""
        ...

    async def get_project_distribution(self) -> ProjectDistribution:
        """Fetch project counts by score range and category."""
        ...

    async def get_analysis_history(self, page: int, page_size: int) -> AnalysisHistoryPage:
        """Fetch one page of completed analyses.

        Args:
            page: 1-based page number
            page_size: Number of analyses per page
        """
        ...

    async def invalidate_cache(self) -> InvalidateCacheResponse:
        """Ask the backend to drop its cached dashboard data."""
        ...

    async def is_available(self) -> bool:
        """Check if the backend is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...
