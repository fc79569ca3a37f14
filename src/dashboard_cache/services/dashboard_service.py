"""Dashboard service for query definitions and cache orchestration.

Each dashboard resource is declared once: its key, its fetcher (one call
to the data source) and its cache policy. The service hands out observers
for those queries, the composed overview, a prefetch helper and the cache
invalidation mutation.
"""

import asyncio
import logging
from functools import partial

from dashboard_cache.dto import AnalysisHistoryPage
from dashboard_cache.entities import CacheStats, MutationResult, Notification, QueryPolicy
from dashboard_cache.keys import dashboard_keys
from dashboard_cache.notifications import LoggingNotifier
from dashboard_cache.protocols import DashboardSource, Notifier
from dashboard_cache.query_client import QueryClient, QueryObserver

from .dashboard_overview import DashboardOverview

logger = logging.getLogger(__name__)

MINUTE = 60.0

# Retry twice whatever the status, backing off 1s, 2s, ... capped at 10s
_FAST_RETRY = {"retry": 2, "retry_base_delay": 1.0, "retry_max_delay": 10.0, "retry_client_errors": True}

DASHBOARD_POLICIES: dict[str, QueryPolicy] = {
    "stats": QueryPolicy(stale_time=5 * MINUTE, gc_time=10 * MINUTE),
    "recent_projects": QueryPolicy(
        stale_time=1 * MINUTE,
        gc_time=10 * MINUTE,
        refetch_interval=1 * MINUTE,
        **_FAST_RETRY,
    ),
    "priority_issues": QueryPolicy(
        stale_time=1 * MINUTE,
        gc_time=10 * MINUTE,
        refetch_interval=1 * MINUTE,
        **_FAST_RETRY,
    ),
    "performance_trends": QueryPolicy(stale_time=5 * MINUTE, gc_time=10 * MINUTE, placeholder=list),
    "issue_trends": QueryPolicy(stale_time=5 * MINUTE, gc_time=10 * MINUTE, placeholder=list),
    "project_distribution": QueryPolicy(stale_time=10 * MINUTE, gc_time=30 * MINUTE, **_FAST_RETRY),
    "analysis_history": QueryPolicy(stale_time=2 * MINUTE, gc_time=10 * MINUTE),
}

# Prefetches use shorter windows so a real read right after hits warm data.
PREFETCH_STALE_TIMES: dict[str, float] = {
    "stats": 30.0,
    "recent_projects": 60.0,
    "priority_issues": 30.0,
}

INVALIDATE_POLICY = QueryPolicy(retry=1, retry_base_delay=1.0, retry_max_delay=1.0, retry_client_errors=True)


class DashboardService:
    """Cache-aware access to dashboard data.

    This service depends on PROTOCOLS, not concrete implementations:
    - DashboardSource: the REST backend, or a fake in tests
    - Notifier: where user-visible messages go

    Example:
        ```python
        from dashboard_cache.query_client import QueryClient
        from dashboard_cache.repositories import HttpDashboardRepository
        from dashboard_cache.services import DashboardService

        service = DashboardService.create(
            client=QueryClient(),
            source=HttpDashboardRepository.create(),
        )

        observer = service.get_recent_projects(limit=5)
        await observer.settled()
        print(observer.data, observer.is_stale)
        ```
    """

    def __init__(
        self,
        client: QueryClient,
        source: DashboardSource,
        notifier: Notifier | None = None,
        policies: dict[str, QueryPolicy] | None = None,
    ) -> None:
        """Initialize the dashboard service.

        Args:
            client: The query cache shared by the application (required).
            source: Dashboard data source (required).
            notifier: Receives the invalidation notifications. Defaults to logging.
            policies: Per-resource policy overrides, merged over DASHBOARD_POLICIES.
        """
        self._client = client
        self._source = source
        self._notifier = notifier or LoggingNotifier()
        self._policies = {**DASHBOARD_POLICIES, **(policies or {})}

    @classmethod
    def create(
        cls,
        client: QueryClient,
        source: DashboardSource,
        notifier: Notifier | None = None,
    ) -> "DashboardService":
        """Factory method to create DashboardService with the standard policies.

        Args:
            client: The query cache (required).
            source: Dashboard data source (required).
            notifier: Notification sink. If None, notifications are logged.

        Returns:
            Configured DashboardService instance
        """
        return cls(client=client, source=source, notifier=notifier)

    def policy(self, resource: str) -> QueryPolicy:
        return self._policies[resource]

    # Query definitions

    def get_stats(self) -> QueryObserver:
        return self._client.observe(dashboard_keys.stats(), self._source.get_stats, self.policy("stats"))

    def get_recent_projects(self, limit: int = 5) -> QueryObserver:
        return self._client.observe(
            dashboard_keys.recent_projects(limit),
            partial(self._source.get_recent_projects, limit),
            self.policy("recent_projects"),
        )

    def get_priority_issues(self, limit: int = 10) -> QueryObserver:
        return self._client.observe(
            dashboard_keys.priority_issues(limit),
            partial(self._source.get_priority_issues, limit),
            self.policy("priority_issues"),
        )

    def get_performance_trends(self, days: int = 30) -> QueryObserver:
        return self._client.observe(
            dashboard_keys.performance_trends(days),
            partial(self._source.get_performance_trends, days),
            self.policy("performance_trends"),
        )

    def get_issue_trends(self, days: int = 30) -> QueryObserver:
        return self._client.observe(
            dashboard_keys.issue_trends(days),
            partial(self._source.get_issue_trends, days),
            self.policy("issue_trends"),
        )

    def get_project_distribution(self) -> QueryObserver:
        return self._client.observe(
            dashboard_keys.distribution(),
            self._source.get_project_distribution,
            self.policy("project_distribution"),
        )

    def get_analysis_history(self, page: int = 1, page_size: int = 20) -> QueryObserver:
        return self._client.observe(
            dashboard_keys.analysis_history_page(page_size, page),
            partial(self._source.get_analysis_history, page, page_size),
            self.policy("analysis_history"),
        )

    @staticmethod
    def next_history_page(page: int, page_size: int, history: AnalysisHistoryPage | None) -> int | None:
        """Page number to load after ``page``, or None when it was the last one."""
        if history is None or len(history.data) < page_size:
            return None
        return page + 1

    # Composed view

    def get_overview(self) -> DashboardOverview:
        return DashboardOverview(
            stats=self.get_stats(),
            recent_projects=self.get_recent_projects(5),
            priority_issues=self.get_priority_issues(10),
            performance_trends=self.get_performance_trends(30),
        )

    # Prefetch

    async def prefetch_all(self) -> None:
        """Warm stats, recent projects (5) and priority issues (10).

        Best effort: failures are logged and never raised.
        """
        await asyncio.gather(
            self._client.prefetch_query(
                dashboard_keys.stats(),
                self._source.get_stats,
                self._prefetch_policy("stats"),
            ),
            self._client.prefetch_query(
                dashboard_keys.recent_projects(5),
                partial(self._source.get_recent_projects, 5),
                self._prefetch_policy("recent_projects"),
            ),
            self._client.prefetch_query(
                dashboard_keys.priority_issues(10),
                partial(self._source.get_priority_issues, 10),
                self._prefetch_policy("priority_issues"),
            ),
        )

    def prefetch_keys(self) -> list[tuple]:
        return [dashboard_keys.stats(), dashboard_keys.recent_projects(5), dashboard_keys.priority_issues(10)]

    def _prefetch_policy(self, resource: str) -> QueryPolicy:
        return self.policy(resource).with_overrides(stale_time=PREFETCH_STALE_TIMES[resource])

    # Invalidation

    async def invalidate_cache(self) -> MutationResult:
        """Ask the backend to drop its cache, then invalidate every dashboard query.

        The whole dashboard namespace is invalidated; no attempt is made to
        work out which queries were affected. The user is notified either way.

        Returns:
            MutationResult with the backend response or the error
        """
        try:
            response = await self._client.mutate(self._source.invalidate_cache, INVALIDATE_POLICY)
        except Exception as e:
            logger.warning("Dashboard cache invalidation failed: %s", e)
            self._notifier.notify(
                Notification(
                    title="Failed to clear cache",
                    description=str(e),
                    variant="destructive",
                )
            )
            return MutationResult(status="error", error=e)

        self.invalidate_dashboard()
        self._notifier.notify(
            Notification(
                title="Cache cleared",
                description="Dashboard data has been refreshed",
            )
        )
        return MutationResult(status="success", data=response)

    def invalidate_dashboard(self) -> int:
        return self._client.invalidate_queries(dashboard_keys.all)

    def invalidate_projects(self) -> int:
        return self._client.invalidate_queries(dashboard_keys.projects())

    def invalidate_issues(self) -> int:
        return self._client.invalidate_queries(dashboard_keys.issues())

    def invalidate_trends(self) -> int:
        return self._client.invalidate_queries(dashboard_keys.trends())

    # Introspection

    def get_cache_stats(self) -> CacheStats:
        return self._client.get_cache_stats()

    async def is_healthy(self) -> bool:
        """Check if the data source is reachable."""
        return await self._source.is_available()

    @property
    def client(self) -> QueryClient:
        """Get the underlying query client (for testing)."""
        return self._client

    @property
    def source(self) -> DashboardSource:
        """Get the underlying data source (for testing)."""
        return self._source

    @property
    def notifier(self) -> Notifier:
        return self._notifier
