"""Data Transfer Objects for API contracts.

These Pydantic models define the external contracts: the payloads the
dashboard backend returns, and the responses this service serves.
They are used for validation and serialization.

Internal cache logic should use entities from the entities package.
"""

from .payloads import (
    AnalysisHistoryItem,
    AnalysisHistoryPage,
    ApiEnvelope,
    CategoryScore,
    ConcerningProject,
    DashboardStats,
    InvalidateCacheResponse,
    IssueTrendPoint,
    LastAnalysis,
    PerformanceTrendPoint,
    PriorityIssue,
    ProjectDistribution,
    RecentProject,
    ScoreDistribution,
    ScoreRange,
    ScoreTrend,
    TopProject,
)
from .responses import (
    CacheStatsResponse,
    DashboardOverviewResponse,
    HealthCheckResponse,
    InvalidateCacheResultResponse,
    NotificationItem,
    PrefetchResponse,
    QueryStateResponse,
)

__all__ = [
    # Backend payloads
    "ApiEnvelope",
    "DashboardStats",
    "ScoreDistribution",
    "ScoreTrend",
    "TopProject",
    "ConcerningProject",
    "RecentProject",
    "LastAnalysis",
    "PriorityIssue",
    "PerformanceTrendPoint",
    "IssueTrendPoint",
    "ProjectDistribution",
    "ScoreRange",
    "CategoryScore",
    "AnalysisHistoryItem",
    "AnalysisHistoryPage",
    "InvalidateCacheResponse",
    # API responses
    "QueryStateResponse",
    "DashboardOverviewResponse",
    "CacheStatsResponse",
    "NotificationItem",
    "InvalidateCacheResultResponse",
    "PrefetchResponse",
    "HealthCheckResponse",
]
