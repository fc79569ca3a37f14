"""Query result domain entity."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

QueryStatus = Literal["pending", "success", "error"]
FetchStatus = Literal["fetching", "idle"]


@dataclass(frozen=True)
class QueryResult:
    """Point-in-time view of one cache entry, as seen by an observer.

    Attributes:
        key: The query key of the entry
        data: Cached data, the placeholder, or None
        error: The error of the last failed fetch, if any
        status: "pending" until data or an error arrives
        fetch_status: "fetching" while a request is in flight
        data_updated_at: Unix timestamp of the last successful fetch (0 = never)
        error_updated_at: Unix timestamp of the last failure (0 = never)
        failure_count: Failed attempts since the last success
        is_stale: Whether the data is past its staleness window or invalidated
        is_placeholder_data: Whether ``data`` is the placeholder
        has_data: Whether a fetch has ever succeeded
    """

    key: tuple
    data: Any = None
    error: BaseException | None = None
    status: QueryStatus = "pending"
    fetch_status: FetchStatus = "idle"
    data_updated_at: float = 0.0
    error_updated_at: float = 0.0
    failure_count: int = 0
    is_stale: bool = True
    is_placeholder_data: bool = False
    has_data: bool = False

    @property
    def is_fetching(self) -> bool:
        return self.fetch_status == "fetching"

    @property
    def is_pending(self) -> bool:
        return not self.has_data

    @property
    def is_loading(self) -> bool:
        """Fetching with no real data yet (placeholder data does not count)."""
        return self.is_fetching and self.is_pending

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def error_message(self) -> str | None:
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__

    @property
    def last_updated(self) -> datetime | None:
        """Convert the data timestamp to a datetime, or None if never fetched."""
        if not self.has_data:
            return None
        return datetime.fromtimestamp(self.data_updated_at)
