"""
Tests for the dashboard cache API.
"""

import pytest
from fastapi.testclient import TestClient

from dashboard_cache.api.app import create_app
from dashboard_cache.errors import APIError
from dashboard_cache.notifications import InMemoryNotifier, LoggingNotifier
from dashboard_cache.query_client import QueryClient


@pytest.fixture
def client(source, sleep):
    """Create a test client backed by the fake source."""
    app = create_app(
        source=source,
        notifier=InMemoryNotifier(),
        query_client=QueryClient(sleep=sleep),
    )
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert data["name"] == "Dashboard Cache API"


def test_health(client, source):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["backend_healthy"] is True

    source.healthy = False
    assert client.get("/health").json()["status"] == "unhealthy"


def test_get_stats(client, source):
    """Test stats endpoint serves camelCase backend data."""
    response = client.get("/dashboard/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["key"] == ["dashboard", "stats"]
    assert data["status"] == "success"
    assert data["is_error"] is False
    assert data["data"]["totalProjects"] == 3
    assert data["data"]["averageScore"] == 72.5


def test_repeated_reads_hit_the_cache(client, source):
    """Test that a fresh entry is served without calling the backend again."""
    client.get("/dashboard/stats")
    response = client.get("/dashboard/stats")
    assert response.status_code == 200
    assert response.json()["is_stale"] is False
    assert source.calls["get_stats"] == 1


def test_get_recent_projects_with_limit(client, source):
    response = client.get("/dashboard/recent-projects", params={"limit": 2})
    assert response.status_code == 200
    data = response.json()
    assert data["key"] == ["dashboard", "projects", "recent", 2]
    assert [project["name"] for project in data["data"]] == ["Acme", "Globex"]


def test_get_recent_projects_rejects_bad_limit(client):
    response = client.get("/dashboard/recent-projects", params={"limit": 0})
    assert response.status_code == 422


def test_get_analysis_history_page(client, source):
    response = client.get("/dashboard/analysis-history", params={"page": 2, "pageSize": 10})
    assert response.status_code == 200
    data = response.json()
    assert data["key"] == ["dashboard", "analysis-history", 10, 2]
    assert data["data"]["page"] == 2
    assert data["data"]["pageSize"] == 10
    assert source.args["get_analysis_history"] == (2, 10)


def test_stats_error_is_reported_in_state(client, source, sleep):
    """Test that a failing backend yields an error state, not an HTTP error."""
    source.failures["get_stats"] = APIError("Internal Server Error", 500, "/dashboard/stats")

    response = client.get("/dashboard/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["is_error"] is True
    assert data["data"] is None
    assert data["error"] == "Internal Server Error"
    assert source.calls["get_stats"] == 3
    assert sleep.delays == [1.0, 2.0]


def test_trends_error_keeps_placeholder(client, source):
    source.failures["get_performance_trends"] = APIError(
        "Network error or server unavailable", 0, "/dashboard/performance-trends"
    )

    data = client.get("/dashboard/performance-trends").json()
    assert data["is_error"] is True
    assert data["data"] == []
    assert data["is_placeholder_data"] is True


def test_get_overview(client, source):
    response = client.get("/dashboard/overview")
    assert response.status_code == 200
    data = response.json()
    assert data["is_loading"] is False
    assert data["is_error"] is False
    assert data["stats"]["totalProjects"] == 3
    assert len(data["recent_projects"]) == 3
    assert data["priority_issues"][0]["title"] == "Missing meta description"
    assert len(data["performance_trends"]) == 2
    assert data["last_updated"] is not None


def test_overview_error_precedence(client, source):
    source.failures["get_recent_projects"] = APIError("projects down", 500, "/dashboard/recent-projects")
    source.failures["get_priority_issues"] = APIError("issues down", 500, "/dashboard/priority-issues")

    data = client.get("/dashboard/overview").json()
    assert data["is_error"] is True
    assert data["error"] == "projects down"


def test_prefetch(client, source):
    """Test that prefetch answers at once and warms the landing queries."""
    response = client.post("/dashboard/prefetch")
    assert response.status_code == 202
    data = response.json()
    assert data["scheduled"] is True
    assert ["dashboard", "stats"] in data["keys"]

    stats = client.get("/cache/stats").json()
    assert stats["total_queries"] == 3
    assert source.calls["get_stats"] == 1

    client.get("/dashboard/stats")
    assert source.calls["get_stats"] == 1


def test_invalidate_cache(client, source):
    client.get("/dashboard/stats")

    response = client.post("/dashboard/invalidate-cache")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Cache invalidated"}

    assert client.get("/cache/stats").json()["stale_queries"] == 1

    notifications = client.get("/dashboard/notifications").json()
    assert notifications[-1]["title"] == "Cache cleared"
    assert notifications[-1]["variant"] == "default"


def test_invalidate_cache_failure(client, source):
    source.failures["invalidate_cache"] = APIError("Internal Server Error", 500, "/dashboard/invalidate-cache")

    response = client.post("/dashboard/invalidate-cache")
    assert response.status_code == 502
    assert "Internal Server Error" in response.json()["detail"]

    notifications = client.get("/dashboard/notifications").json()
    assert notifications[-1]["title"] == "Failed to clear cache"
    assert notifications[-1]["variant"] == "destructive"


def test_notifications_empty_for_logging_notifier(source, sleep):
    app = create_app(source=source, notifier=LoggingNotifier(), query_client=QueryClient(sleep=sleep))
    with TestClient(app) as test_client:
        assert test_client.post("/dashboard/invalidate-cache").status_code == 200

        response = test_client.get("/dashboard/notifications")

    assert response.status_code == 200
    assert response.json() == []


def test_get_cache_stats(client):
    """Test cache stats endpoint."""
    client.get("/dashboard/stats")
    client.get("/dashboard/project-distribution")

    response = client.get("/cache/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["total_queries"] == 2
    assert data["fresh_queries"] == 2
    assert data["error_queries"] == 0
    assert data["cache_size"] > 0
