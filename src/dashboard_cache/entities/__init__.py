"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by the query client
and services. They are NOT used for API contracts - use DTOs from the
dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
"""

from .cache_stats import CacheStats
from .mutation_result import MutationResult
from .notification import Notification
from .query_policy import DEFAULT_POLICY, QueryPolicy
from .query_result import QueryResult

__all__ = [
    "CacheStats",
    "DEFAULT_POLICY",
    "MutationResult",
    "Notification",
    "QueryPolicy",
    "QueryResult",
]
