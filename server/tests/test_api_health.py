"""API health, info and metrics tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from autodetail.core import dependencies
from autodetail.main import create_app


@pytest.mark.asyncio
async def test_health_reports_connected_database(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}


@pytest.mark.asyncio
async def test_health_reports_unreachable_database():
    """A failing database turns the health check into a 500."""

    class BrokenSession:
        async def execute(self, *args, **kwargs):
            raise ConnectionError("connection refused")

    async def broken_db():
        yield BrokenSession()

    app = create_app()
    app.dependency_overrides[dependencies.get_db] = broken_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 500
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["database"] == "disconnected"
    assert "connection refused" in data["error"]


@pytest.mark.asyncio
async def test_info_endpoint(test_client):
    response = await test_client.get("/info")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "autodetail-booking-api"
    assert data["environment"] == "test"
    assert "version" in data
    assert "business" in data


@pytest.mark.asyncio
async def test_metrics_endpoint(test_client):
    """Test the metrics endpoint."""
    await test_client.get("/health")

    response = await test_client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "http_requests_total" in response.text


@pytest.mark.asyncio
async def test_responses_carry_request_id_and_security_headers(test_client):
    response = await test_client.get("/info", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "web.squarecdn.com" in response.headers["Content-Security-Policy"]


@pytest.mark.asyncio
async def test_unknown_route_is_404(test_client):
    response = await test_client.get("/api/nope")
    assert response.status_code == 404
