"""Dashboard Cache - Cached, de-duplicated access to dashboard data.

This package provides a layered architecture for the dashboard query cache:

Layers:
    - keys: Hierarchical query keys
    - query_client: The cache itself (entries, fetches, observers)
    - protocols: Interface contracts (DashboardSource, Notifier)
    - repositories: Data access implementations
    - services: Query definitions, composed view, prefetch, invalidation
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from dashboard_cache import DashboardService, HttpDashboardRepository, QueryClient

    # Using class method (recommended, like Path.home())
    service = DashboardService.create(
        client=QueryClient(),
        source=HttpDashboardRepository.create(),
    )
    ```

For HTTP API:
    ```python
    from dashboard_cache.api.app import app
    ```
"""

from dashboard_cache.config import get_http_client, settings
from dashboard_cache.entities import CacheStats, QueryPolicy, QueryResult
from dashboard_cache.errors import APIError, DashboardCacheError, QueryCancelledError
from dashboard_cache.handlers import DashboardHandler
from dashboard_cache.keys import dashboard_keys
from dashboard_cache.notifications import InMemoryNotifier, LoggingNotifier
from dashboard_cache.protocols import DashboardSource, NotificationFeed, Notifier
from dashboard_cache.query_client import QueryClient, QueryObserver
from dashboard_cache.repositories import HttpDashboardRepository
from dashboard_cache.services import DashboardOverview, DashboardService

__all__ = [
    # Configuration
    "settings",
    "get_http_client",
    # Cache
    "QueryClient",
    "QueryObserver",
    "dashboard_keys",
    # Protocols (interfaces)
    "DashboardSource",
    "Notifier",
    "NotificationFeed",
    # Services (query definitions)
    "DashboardService",
    "DashboardOverview",
    # Handlers (HTTP)
    "DashboardHandler",
    # Repositories (data access)
    "HttpDashboardRepository",
    # Notifications
    "LoggingNotifier",
    "InMemoryNotifier",
    # Entities (domain models)
    "QueryPolicy",
    "QueryResult",
    "CacheStats",
    # Errors
    "APIError",
    "DashboardCacheError",
    "QueryCancelledError",
]
