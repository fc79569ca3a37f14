"""
Tests for the HTTP dashboard repository against a mocked backend.
"""

import httpx
import pytest

from dashboard_cache.config import get_http_client
from dashboard_cache.errors import APIError
from dashboard_cache.protocols import DashboardSource
from dashboard_cache.repositories import HttpDashboardRepository

BASE_URL = "http://backend.test/api"


def make_repository(handler) -> HttpDashboardRepository:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return HttpDashboardRepository(client=client)


def test_repository_satisfies_protocol():
    assert isinstance(HttpDashboardRepository(base_url=BASE_URL), DashboardSource)


def test_http_client_sends_bearer_token():
    client = get_http_client(base_url=BASE_URL, token="secret")
    assert client.headers["Authorization"] == "Bearer secret"
    assert client.headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_get_stats_unwraps_envelope():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {
                    "totalProjects": 4,
                    "averageScore": 71.5,
                    "scoreDistribution": {"excellent": 1, "needsWork": 2},
                },
            },
        )

    repository = make_repository(handler)
    stats = await repository.get_stats()
    await repository.close()

    assert requests[0].method == "GET"
    assert requests[0].url.path == "/api/dashboard/stats"
    assert stats.total_projects == 4
    assert stats.average_score == 71.5
    assert stats.score_distribution.needs_work == 2


@pytest.mark.asyncio
async def test_list_endpoints_send_their_parameters():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen[request.url.path] = dict(request.url.params)
        return httpx.Response(200, json={"success": True, "data": []})

    repository = make_repository(handler)
    assert await repository.get_recent_projects(5) == []
    assert await repository.get_priority_issues(10) == []
    assert await repository.get_performance_trends(7) == []
    assert await repository.get_issue_trends(30) == []
    await repository.close()

    assert seen["/api/dashboard/recent-projects"] == {"limit": "5"}
    assert seen["/api/dashboard/priority-issues"] == {"limit": "10"}
    assert seen["/api/dashboard/performance-trends"] == {"days": "7"}
    assert seen["/api/dashboard/issue-trends"] == {"days": "30"}


@pytest.mark.asyncio
async def test_analysis_history_keeps_page_metadata():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["page"] == "2"
        assert request.url.params["pageSize"] == "20"
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": [
                    {
                        "id": "a1",
                        "projectId": "p1",
                        "projectName": "Acme",
                        "overallScore": 77,
                        "completedAt": "2024-05-01T10:00:00Z",
                    }
                ],
                "total": 21,
                "page": 2,
                "pageSize": 20,
            },
        )

    repository = make_repository(handler)
    history = await repository.get_analysis_history(page=2, page_size=20)
    await repository.close()

    assert history.total == 21
    assert history.page == 2
    assert history.page_size == 20
    assert history.data[0].project_name == "Acme"


@pytest.mark.asyncio
async def test_invalidate_cache_posts():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/api/dashboard/invalidate-cache"
        return httpx.Response(200, json={"success": True, "message": "Cache invalidated"})

    repository = make_repository(handler)
    response = await repository.invalidate_cache()
    await repository.close()

    assert response.success
    assert response.message == "Cache invalidated"


@pytest.mark.asyncio
async def test_server_error_uses_body_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"success": False, "error": "Database unavailable"})

    repository = make_repository(handler)
    with pytest.raises(APIError) as exc_info:
        await repository.get_stats()
    await repository.close()

    assert exc_info.value.status == 500
    assert exc_info.value.message == "Database unavailable"
    assert exc_info.value.endpoint == "/dashboard/stats"
    assert not exc_info.value.is_client_error


@pytest.mark.asyncio
async def test_client_error_without_json_uses_reason_phrase():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not here")

    repository = make_repository(handler)
    with pytest.raises(APIError) as exc_info:
        await repository.get_project_distribution()
    await repository.close()

    assert exc_info.value.status == 404
    assert exc_info.value.message == "Not Found"
    assert exc_info.value.is_client_error


@pytest.mark.asyncio
async def test_unsuccessful_envelope_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "message": "Analysis still running"})

    repository = make_repository(handler)
    with pytest.raises(APIError, match="Analysis still running") as exc_info:
        await repository.get_stats()
    await repository.close()

    assert exc_info.value.status == 200


@pytest.mark.asyncio
async def test_unexpected_payload_shape_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "data": {"projects": "many"}})

    repository = make_repository(handler)
    with pytest.raises(APIError, match="Unexpected response shape"):
        await repository.get_stats()
    await repository.close()


@pytest.mark.asyncio
async def test_transport_failure_has_status_zero():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    repository = make_repository(handler)
    with pytest.raises(APIError) as exc_info:
        await repository.get_stats()

    assert exc_info.value.status == 0
    assert exc_info.value.message == "Network error or server unavailable"
    assert not await repository.is_available()
    await repository.close()


@pytest.mark.asyncio
async def test_is_available_checks_health_endpoint():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/health"
        return httpx.Response(200, json={"status": "ok"})

    repository = make_repository(handler)
    assert await repository.is_available()
    await repository.close()


@pytest.mark.asyncio
async def test_body_without_envelope_is_malformed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"totalProjects": 1}])

    repository = make_repository(handler)
    with pytest.raises(APIError, match="Malformed response body"):
        await repository.get_stats()
    await repository.close()
