"""Repository layer for data access.

This layer hides the dashboard backend behind the DashboardSource
protocol. This enables:
- Easy swapping of implementations (REST backend, in-memory fake, etc.)
- Unit testing with mock implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from dashboard_cache.protocols import DashboardSource

from .http_dashboard_repository import HttpDashboardRepository

__all__ = [
    "DashboardSource",
    "HttpDashboardRepository",
]
