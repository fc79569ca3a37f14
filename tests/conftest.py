"""Shared fixtures: a controllable clock, a recording sleep and a fake backend."""

import asyncio
from collections import Counter

import pytest
import pytest_asyncio

from dashboard_cache.dto import (
    AnalysisHistoryItem,
    AnalysisHistoryPage,
    DashboardStats,
    InvalidateCacheResponse,
    IssueTrendPoint,
    PerformanceTrendPoint,
    PriorityIssue,
    ProjectDistribution,
    RecentProject,
    ScoreRange,
)
from dashboard_cache.notifications import InMemoryNotifier
from dashboard_cache.query_client import QueryClient
from dashboard_cache.services import DashboardService


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Backoff sleep that records the requested delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


class FakeDashboardSource:
    """In-memory DashboardSource.

    ``failures[name]`` is either an exception raised on every call or a list
    of exceptions raised on the next calls, one per call. ``gate`` holds
    every call until it is set.
    """

    def __init__(self) -> None:
        self.calls: Counter[str] = Counter()
        self.args: dict[str, tuple] = {}
        self.failures: dict[str, BaseException | list[BaseException]] = {}
        self.gate: asyncio.Event | None = None
        self.healthy = True

        self.stats = DashboardStats(total_projects=3, average_score=72.5, critical_issues=4)
        self.recent_projects = [
            RecentProject(id="p1", name="Acme", url="https://acme.test", current_score=81),
            RecentProject(id="p2", name="Globex", url="https://globex.test", current_score=64),
            RecentProject(id="p3", name="Initech", url="https://initech.test", current_score=47),
        ]
        self.priority_issues = [
            PriorityIssue(
                id="i1",
                project_id="p1",
                project_name="Acme",
                type="meta",
                severity="high",
                title="Missing meta description",
                affected_pages=12,
            ),
        ]
        self.performance_trends = [
            PerformanceTrendPoint(date="2024-05-01", overall_score=70),
            PerformanceTrendPoint(date="2024-05-02", overall_score=72),
        ]
        self.issue_trends = [IssueTrendPoint(date="2024-05-01", new_issues=3, resolved_issues=1)]
        self.distribution = ProjectDistribution(
            score_ranges=[ScoreRange(range="80-100", count=1, percentage=33.3)],
        )
        self.history_items = [
            AnalysisHistoryItem(
                id=f"a{n}",
                project_id="p1",
                project_name="Acme",
                overall_score=70 + n,
                completed_at="2024-05-01T10:00:00Z",
            )
            for n in range(25)
        ]
        self.invalidate_response = InvalidateCacheResponse(success=True, message="Cache invalidated")

    async def _call(self, name: str, value, *args):
        self.calls[name] += 1
        self.args[name] = args
        if self.gate is not None:
            await self.gate.wait()

        errors = self.failures.get(name)
        if isinstance(errors, list):
            if errors:
                raise errors.pop(0)
        elif errors is not None:
            raise errors
        return value

    async def get_stats(self) -> DashboardStats:
        return await self._call("get_stats", self.stats)

    async def get_recent_projects(self, limit: int) -> list[RecentProject]:
        return await self._call("get_recent_projects", self.recent_projects[:limit], limit)

    async def get_priority_issues(self, limit: int) -> list[PriorityIssue]:
        return await self._call("get_priority_issues", self.priority_issues[:limit], limit)

    async def get_performance_trends(self, days: int) -> list[PerformanceTrendPoint]:
        return await self._call("get_performance_trends", self.performance_trends, days)

    async def get_issue_trends(self, days: int) -> list[IssueTrendPoint]:
        return await self._call("get_issue_trends", self.issue_trends, days)

    async def get_project_distribution(self) -> ProjectDistribution:
        return await self._call("get_project_distribution", self.distribution)

    async def get_analysis_history(self, page: int, page_size: int) -> AnalysisHistoryPage:
        start = (page - 1) * page_size
        history = AnalysisHistoryPage(
            data=self.history_items[start : start + page_size],
            total=len(self.history_items),
            page=page,
            page_size=page_size,
        )
        return await self._call("get_analysis_history", history, page, page_size)

    async def invalidate_cache(self) -> InvalidateCacheResponse:
        return await self._call("invalidate_cache", self.invalidate_response)

    async def is_available(self) -> bool:
        return self.healthy


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest_asyncio.fixture
async def client(clock, sleep):
    """Query client on the fake clock; cleared after the test."""
    query_client = QueryClient(clock=clock, sleep=sleep)
    yield query_client
    query_client.clear()
    await asyncio.sleep(0)


@pytest.fixture
def source():
    return FakeDashboardSource()


@pytest.fixture
def notifier():
    return InMemoryNotifier()


@pytest.fixture
def service(client, source, notifier):
    return DashboardService.create(client=client, source=source, notifier=notifier)
