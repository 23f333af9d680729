"""
Tests for the application entry point: root, health and error handlers.
"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from dsa_tutor.main import app


def test_read_root(client: TestClient):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "DSA Tutor Chat API is running"}


def test_health_check(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["services"]["database"] == "connected"
    # No API key in the test environment
    assert data["services"]["generation_provider"] == "fallback_only"


def test_health_check_database_down(client: TestClient):
    with patch("dsa_tutor.main.check_database_connection", return_value=False):
        response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


def test_provider_created_at_startup(client: TestClient):
    assert app.state.generation_provider.configured is False


def test_unknown_route(client: TestClient):
    assert client.get("/api/v1/unknown").status_code == 404


def test_cors_preflight(client: TestClient):
    response = client.options(
        "/api/v1/sessions",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST"
        }
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"
