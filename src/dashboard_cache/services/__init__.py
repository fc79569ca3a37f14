"""Service layer for dashboard query logic.

This layer declares the dashboard queries and orchestrates the cache.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> QueryClient -> Repository
    (HTTP)  -> (Queries) -> (Cache)   -> (Backend API)

Usage:
    ```python
    from dashboard_cache.services import DashboardService

    # Using factory method (recommended)
    service = DashboardService.create(client=client, source=source)

    # Or manual creation with policy overrides
    service = DashboardService(client=client, source=source, policies={...})
    ```
"""

from .dashboard_overview import DashboardOverview
from .dashboard_service import DASHBOARD_POLICIES, PREFETCH_STALE_TIMES, DashboardService

__all__ = [
    "DASHBOARD_POLICIES",
    "PREFETCH_STALE_TIMES",
    "DashboardOverview",
    "DashboardService",
]
