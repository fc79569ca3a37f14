"""Query key registry.

Keys are tuples whose leading segments name the namespace and resource
category, followed by the query parameters in call order. A shorter key
is a prefix of every key below it, so ``("dashboard",)`` addresses all
dashboard data at once.
"""

QueryKey = tuple[str | int, ...]


def key_for(*segments: str | int) -> QueryKey:
    """Build a query key from its segments, in order."""
    return tuple(segments)


def matches_prefix(key: QueryKey, prefix: QueryKey) -> bool:
    """Check whether ``key`` lies under ``prefix``. The empty prefix matches all."""
    return key[: len(prefix)] == prefix


class DashboardKeys:
    """Hierarchical keys for dashboard queries."""

    all: QueryKey = ("dashboard",)

    def stats(self) -> QueryKey:
        return key_for(*self.all, "stats")

    def projects(self) -> QueryKey:
        return key_for(*self.all, "projects")

    def recent_projects(self, limit: int) -> QueryKey:
        return key_for(*self.projects(), "recent", limit)

    def issues(self) -> QueryKey:
        return key_for(*self.all, "issues")

    def priority_issues(self, limit: int) -> QueryKey:
        return key_for(*self.issues(), "priority", limit)

    def trends(self) -> QueryKey:
        return key_for(*self.all, "trends")

    def performance_trends(self, days: int) -> QueryKey:
        return key_for(*self.trends(), "performance", days)

    def issue_trends(self, days: int) -> QueryKey:
        return key_for(*self.trends(), "issues", days)

    def distribution(self) -> QueryKey:
        return key_for(*self.all, "distribution")

    def analysis_history(self) -> QueryKey:
        return key_for(*self.all, "analysis-history")

    def analysis_history_page(self, page_size: int, page: int) -> QueryKey:
        return key_for(*self.analysis_history(), page_size, page)


dashboard_keys = DashboardKeys()
