"""HTTP implementation of DashboardSource.

Talks to the dashboard REST backend. Every endpoint answers with a
``{"success": bool, "data": ...}`` envelope; anything else is a failure.

Key features:
- Lazily created ``httpx.AsyncClient`` with connection pooling
- Per-request timeout (30s by default)
- Optional bearer token
- One network call per method, no caching or retries of its own
"""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from dashboard_cache.config import get_http_client, settings
from dashboard_cache.dto import (
    AnalysisHistoryPage,
    ApiEnvelope,
    DashboardStats,
    InvalidateCacheResponse,
    IssueTrendPoint,
    PerformanceTrendPoint,
    PriorityIssue,
    ProjectDistribution,
    RecentProject,
)
from dashboard_cache.errors import APIError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ENVELOPE = TypeAdapter(ApiEnvelope[Any])
_STATS = TypeAdapter(DashboardStats)
_RECENT_PROJECTS = TypeAdapter(list[RecentProject])
_PRIORITY_ISSUES = TypeAdapter(list[PriorityIssue])
_PERFORMANCE_TRENDS = TypeAdapter(list[PerformanceTrendPoint])
_ISSUE_TRENDS = TypeAdapter(list[IssueTrendPoint])
_DISTRIBUTION = TypeAdapter(ProjectDistribution)
_HISTORY_PAGE = TypeAdapter(AnalysisHistoryPage)
_INVALIDATE = TypeAdapter(InvalidateCacheResponse)


class HttpDashboardRepository:
    """REST implementation of the DashboardSource protocol.

    This class satisfies the DashboardSource protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        source = HttpDashboardRepository.create(base_url="https://api.example.com/api")
        stats = await source.get_stats()
        print(stats.total_projects)
        await source.close()
        ```
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            client: HTTP client to use. If None, one is created on first use.
            base_url: Backend API base URL. Defaults to settings.api_base_url.
            token: Bearer token sent with every request. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.api_timeout.
        """
        self._client = client
        self._base_url = base_url or settings.api_base_url
        self._token = token
        self._timeout = timeout or settings.api_timeout

    @classmethod
    def create(
        cls,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
    ) -> "HttpDashboardRepository":
        """Factory method to create HttpDashboardRepository with defaults.

        Args:
            base_url: Backend API URL. If None, uses settings.
            token: Bearer token. If None, uses settings.
            timeout: Request timeout in seconds. If None, uses settings.

        Returns:
            Configured HttpDashboardRepository
        """
        return cls(base_url=base_url, token=token, timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = get_http_client(
                base_url=self._base_url,
                token=self._token,
                timeout=self._timeout,
            )
        return self._client

    @property
    def base_url(self) -> str:
        return self._base_url

    async def get_stats(self) -> DashboardStats:
        return await self._get_data("/dashboard/stats", _STATS)

    async def get_recent_projects(self, limit: int = 5) -> list[RecentProject]:
        return await self._get_data("/dashboard/recent-projects", _RECENT_PROJECTS, {"limit": limit})

    async def get_priority_issues(self, limit: int = 10) -> list[PriorityIssue]:
        return await self._get_data("/dashboard/priority-issues", _PRIORITY_ISSUES, {"limit": limit})

    async def get_performance_trends(self, days: int = 30) -> list[PerformanceTrendPoint]:
        return await self._get_data("/dashboard/performance-trends", _PERFORMANCE_TRENDS, {"days": days})

    async def get_issue_trends(self, days: int = 30) -> list[IssueTrendPoint]:
        return await self._get_data("/dashboard/issue-trends", _ISSUE_TRENDS, {"days": days})

    async def get_project_distribution(self) -> ProjectDistribution:
        return await self._get_data("/dashboard/project-distribution", _DISTRIBUTION)

    async def get_analysis_history(self, page: int = 1, page_size: int = 20) -> AnalysisHistoryPage:
        # The page metadata lives next to "data" in the envelope, so keep all of it.
        endpoint = "/dashboard/analysis-history"
        body, status = await self._request("GET", endpoint, {"page": page, "pageSize": page_size})
        return self._validate(_HISTORY_PAGE, body, status, endpoint)

    async def invalidate_cache(self) -> InvalidateCacheResponse:
        endpoint = "/dashboard/invalidate-cache"
        body, status = await self._request("POST", endpoint)
        return self._validate(_INVALIDATE, body, status, endpoint)

    async def is_available(self) -> bool:
        """Check if the backend answers its health endpoint.

        Returns:
            True if the backend responded with a non-error status, False otherwise
        """
        try:
            response = await self.client.get("/health")
            return not response.is_error
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get_data(
        self,
        endpoint: str,
        adapter: TypeAdapter[T],
        params: dict[str, Any] | None = None,
    ) -> T:
        body, status = await self._request("GET", endpoint, params)
        return self._validate(adapter, body.get("data"), status, endpoint)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> tuple[dict[str, Any], int]:
        """Perform one call and unwrap the success envelope.

        Returns:
            The decoded response body and the HTTP status code

        Raises:
            APIError: On transport failure, non-2xx status, undecodable body
                or a ``success: false`` envelope
        """
        try:
            response = await self.client.request(method, endpoint, params=params)
        except httpx.HTTPError as e:
            logger.error("API request failed for %s: %s", endpoint, e)
            raise APIError("Network error or server unavailable", 0, endpoint) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            message = _error_message(body) or response.reason_phrase or "Request failed"
            raise APIError(message, response.status_code, endpoint)

        try:
            envelope = _ENVELOPE.validate_python(body)
        except ValidationError as e:
            raise APIError("Malformed response body", response.status_code, endpoint) from e

        if not envelope.success:
            message = envelope.error or envelope.message or "Request was not successful"
            raise APIError(message, response.status_code, endpoint)

        return body, response.status_code

    @staticmethod
    def _validate(adapter: TypeAdapter[T], payload: Any, status: int, endpoint: str) -> T:
        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            raise APIError(f"Unexpected response shape: {e.error_count()} validation errors", status, endpoint) from e


def _error_message(body: Any) -> str | None:
    if isinstance(body, dict):
        return body.get("error") or body.get("message")
    return None
