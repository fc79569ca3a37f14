"""Cache statistics domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of the query cache contents.

    Attributes:
        total_queries: Number of entries in the cache
        fresh_queries: Successful entries still inside their staleness window
        stale_queries: Entries past their staleness window or invalidated
        error_queries: Entries whose last fetch failed
        loading_queries: Entries still waiting for their first data
        cache_size: Size of all cached data serialized as JSON, in bytes
    """

    total_queries: int = 0
    fresh_queries: int = 0
    stale_queries: int = 0
    error_queries: int = 0
    loading_queries: int = 0
    cache_size: int = 0
