"""Tests for health check endpoints."""


def test_health_check(client):
    """Test basic health check."""
    response = client.get("/api/v1/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readiness_check(client):
    """Database and in-memory cache are both reachable in tests."""
    response = client.get("/api/v1/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": True, "cache": True}


def test_root_endpoint(client):
    """Test root endpoint returns API info."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Product Catalog Service"
    assert "version" in data
    assert "docs" in data


def test_run_starts_uvicorn():
    from unittest.mock import patch

    from catalog.main import run, settings

    with patch("catalog.main.uvicorn.run") as uvicorn_run:
        run()

    uvicorn_run.assert_called_once_with("catalog.main:app", host=settings.HOST, port=settings.PORT)
