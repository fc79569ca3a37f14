"""Payload DTOs for the dashboard backend API.

The backend speaks camelCase JSON; fields are snake_case here and aliased.
Unknown fields are kept so newer backends do not break older clients.
"""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BackendModel(BaseModel):
    """Base model for backend payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class ApiEnvelope(BackendModel, Generic[T]):
    """The ``{success, data}`` wrapper every endpoint responds with."""

    success: bool
    data: T | None = None
    error: str | None = None
    message: str | None = None


class ScoreDistribution(BackendModel):
    excellent: int = 0  # 80-100
    good: int = 0  # 60-79
    needs_work: int = 0  # 40-59
    poor: int = 0  # 0-39


class ScoreTrend(BackendModel):
    date: str
    overall_score: float
    technical_score: float = 0
    content_score: float = 0
    on_page_score: float = 0
    ux_score: float = 0


class TopProject(BackendModel):
    id: str
    name: str
    score: float
    improvement: float = 0


class ConcerningProject(BackendModel):
    id: str
    name: str
    score: float
    critical_issues: int = 0


class DashboardStats(BackendModel):
    """Aggregate counts and scores across the user's projects."""

    total_projects: int
    active_analyses: int = 0
    completed_analyses: int = 0
    average_score: float = 0
    score_improvement: float = 0
    weekly_issues: int = 0
    resolved_issues: int = 0
    critical_issues: int = 0
    last_scan_date: str | None = None
    score_distribution: ScoreDistribution = Field(default_factory=ScoreDistribution)
    score_trends: list[ScoreTrend] = Field(default_factory=list)
    top_projects: list[TopProject] = Field(default_factory=list)
    concerning_projects: list[ConcerningProject] = Field(default_factory=list)


class LastAnalysis(BackendModel):
    id: str
    completed_at: str | None = None
    score: float | None = None
    issues_found: int | None = None


class RecentProject(BackendModel):
    id: str
    name: str
    url: str
    favicon: str | None = None
    current_score: float = 0
    previous_score: float | None = None
    last_scan_date: str | None = None
    status: Literal["completed", "analyzing", "queued", "error"] = "completed"
    critical_issues: int = 0
    progress: float | None = None
    created_at: str | None = None
    updated_at: str | None = None
    trend: Literal["up", "down", "stable"] = "stable"
    last_analysis: LastAnalysis | None = None


class PriorityIssue(BackendModel):
    id: str
    project_id: str
    project_name: str
    type: str
    severity: Literal["critical", "high", "medium", "low"]
    title: str
    affected_pages: int = 0
    estimated_impact: str = ""
    quick_fix: bool = False


class PerformanceTrendPoint(BackendModel):
    date: str
    overall_score: float
    technical_score: float = 0
    content_score: float = 0
    on_page_score: float = 0
    ux_score: float = 0
    project_count: int = 0


class IssueTrendPoint(BackendModel):
    date: str
    new_issues: int = 0
    resolved_issues: int = 0
    critical_issues: int = 0
    total_issues: int = 0


class ScoreRange(BackendModel):
    range: str
    count: int
    percentage: float


class CategoryScore(BackendModel):
    category: str
    average_score: float
    project_count: int


class ProjectDistribution(BackendModel):
    score_ranges: list[ScoreRange] = Field(default_factory=list)
    categories: list[CategoryScore] = Field(default_factory=list)


class AnalysisHistoryItem(BackendModel):
    id: str
    project_id: str
    project_name: str
    overall_score: float
    technical_score: float = 0
    content_score: float = 0
    on_page_score: float = 0
    ux_score: float = 0
    completed_at: str
    issue_count: int = 0
    critical_issues: int = 0
    change_from_previous: float = 0


class AnalysisHistoryPage(BackendModel):
    """One page of analysis history; the envelope fields are kept."""

    data: list[AnalysisHistoryItem] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20


class InvalidateCacheResponse(BackendModel):
    success: bool
    message: str = ""

