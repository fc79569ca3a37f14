"""Composed dashboard view.

Folds the loading, error and freshness state of several queries into
one object so a view does not reduce them by hand.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any

from dashboard_cache.query_client import QueryObserver


class DashboardOverview:
    """Stats, recent projects, priority issues and performance trends as one view.

    Aggregation rules:
    - ``is_loading`` and ``is_stale``: true if any of stats, projects or
      issues is loading / stale.
    - ``error``: the first error in the order stats, projects, issues.
      Errors of the later queries are not reported while an earlier one fails.
    - ``last_updated``: the most recent fetch time among stats, projects
      and issues.
    - ``refetch()``: refetches all four queries concurrently.

    Trends are fetched and refetched with the rest but do not take part
    in the loading, error or freshness rules.
    """

    def __init__(
        self,
        stats: QueryObserver,
        recent_projects: QueryObserver,
        priority_issues: QueryObserver,
        performance_trends: QueryObserver,
    ) -> None:
        self._stats = stats
        self._projects = recent_projects
        self._issues = priority_issues
        self._trends = performance_trends

    @property
    def queries(self) -> dict[str, QueryObserver]:
        """Individual observers, for views that need finer control."""
        return {
            "stats": self._stats,
            "projects": self._projects,
            "issues": self._issues,
            "trends": self._trends,
        }

    @property
    def _tracked(self) -> tuple[QueryObserver, QueryObserver, QueryObserver]:
        # Order matters: it is the error precedence.
        return (self._stats, self._projects, self._issues)

    # Data

    @property
    def stats(self) -> Any:
        return self._stats.data

    @property
    def recent_projects(self) -> Any:
        return self._projects.data

    @property
    def priority_issues(self) -> Any:
        return self._issues.data

    @property
    def performance_trends(self) -> Any:
        return self._trends.data

    # State

    @property
    def is_loading(self) -> bool:
        return any(observer.is_loading for observer in self._tracked)

    @property
    def is_error(self) -> bool:
        return any(observer.is_error for observer in self._tracked)

    @property
    def error(self) -> BaseException | None:
        for observer in self._tracked:
            if observer.error is not None:
                return observer.error
        return None

    @property
    def error_message(self) -> str | None:
        error = self.error
        if error is None:
            return None
        return str(error) or type(error).__name__

    @property
    def last_updated_at(self) -> float | None:
        timestamps = [observer.result.data_updated_at for observer in self._tracked if observer.result.has_data]
        return max(timestamps) if timestamps else None

    @property
    def last_updated(self) -> datetime | None:
        updated_at = self.last_updated_at
        return datetime.fromtimestamp(updated_at) if updated_at is not None else None

    @property
    def is_stale(self) -> bool:
        return any(observer.is_stale for observer in self._tracked)

    # Actions

    async def refetch(self) -> None:
        await asyncio.gather(*(observer.refetch() for observer in self.queries.values()))

    async def settled(self) -> "DashboardOverview":
        """Wait until every in-flight fetch of the four queries has finished."""
        await asyncio.gather(*(observer.settled() for observer in self.queries.values()))
        return self

    def subscribe(self, listener: Callable[["DashboardOverview"], None]) -> Callable[[], None]:
        """Call ``listener`` with this overview whenever any query changes."""
        unsubscribers = [
            observer.subscribe(lambda _result: listener(self)) for observer in self.queries.values()
        ]

        def unsubscribe() -> None:
            for unsubscribe_one in unsubscribers:
                unsubscribe_one()

        return unsubscribe

    def close(self) -> None:
        for observer in self.queries.values():
            observer.close()

    def __enter__(self) -> "DashboardOverview":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
