"""Query cache policy entity."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from dashboard_cache.config import settings
from dashboard_cache.errors import APIError


@dataclass(frozen=True)
class QueryPolicy:
    """Cache policy for one query resource.

    All durations are in seconds.

    Attributes:
        stale_time: Age after which cached data is stale. Stale data is still
            served while a background refetch runs.
        gc_time: How long an entry with no observers stays in memory.
        refetch_interval: Period of background refetches while observed, or None.
        retry: Number of retries after the first failed attempt.
        retry_base_delay: Delay before the first retry.
        retry_max_delay: Upper bound for any retry delay.
        retry_client_errors: Whether 4xx responses are retried too.
        placeholder: Factory for data shown before the first successful fetch.
    """

    stale_time: float = settings.query_stale_time
    gc_time: float = settings.query_gc_time
    refetch_interval: float | None = None
    retry: int = settings.query_retry
    retry_base_delay: float = 1.0
    retry_max_delay: float = settings.query_retry_max_delay
    retry_client_errors: bool = False
    placeholder: Callable[[], Any] | None = None

    def __post_init__(self) -> None:
        if self.retry < 0:
            raise ValueError("retry must not be negative")
        if self.refetch_interval is not None and self.refetch_interval <= 0:
            raise ValueError("refetch_interval must be positive when set")

    def retry_delay(self, attempt_index: int) -> float:
        """Backoff before retry ``attempt_index + 1``: min(base * 2^n, cap)."""
        return min(self.retry_base_delay * 2**attempt_index, self.retry_max_delay)

    def should_retry(self, error: BaseException) -> bool:
        """Client errors fail fast; everything else is retried."""
        if not isinstance(error, Exception):
            return False
        if isinstance(error, APIError) and error.is_client_error:
            return self.retry_client_errors
        return True

    def placeholder_data(self) -> Any:
        return self.placeholder() if self.placeholder is not None else None

    def with_overrides(self, **changes: Any) -> "QueryPolicy":
        """Return a copy of this policy with some fields replaced."""
        return replace(self, **changes)


DEFAULT_POLICY = QueryPolicy()
