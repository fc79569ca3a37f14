"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (HTTP backend, in-memory fake, etc.)
- Unit testing with mock implementations
- Clear separation of concerns

Usage:
    ```python
    from dashboard_cache.protocols import DashboardSource, Notifier

    # Type hints work with any implementation
    source: DashboardSource = HttpDashboardRepository()  # works
    source: DashboardSource = FakeDashboardSource()      # also works
    ```
"""

from .dashboard_source import DashboardSource
from .notifier import NotificationFeed, Notifier

__all__ = [
    "DashboardSource",
    "Notifier",
    "NotificationFeed",
]
