"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (query definitions), not directly on the
query client or repositories.

Architecture:
    Handler -> Service -> QueryClient -> Repository
    (HTTP)  -> (Queries) -> (Cache)   -> (Backend API)
"""

from .dashboard_handler import DashboardHandler

__all__ = [
    "DashboardHandler",
]
