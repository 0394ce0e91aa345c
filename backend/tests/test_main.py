"""Tests for tractionboard.main FastAPI application."""

import pytest
from starlette.testclient import TestClient

from tractionboard import main
from tractionboard.main import app


@pytest.fixture(autouse=True)
def _data_dir(tmp_path, monkeypatch):
    """Point the lifespan database at a temp directory."""
    monkeypatch.setattr(main.settings, "DATABASE_DIR", str(tmp_path / "data"))
    return tmp_path / "data"


class TestHealthEndpoint:
    """GET /health returns 200 with {"status": "ok"}."""

    def test_health_returns_ok_status(self):
        with TestClient(app) as client:
            response = client.get("/health")
            assert response.status_code == 200
            assert response.json() == {"status": "ok"}


class TestCORSMiddleware:
    """CORS headers present on response when Origin header sent."""

    def test_cors_allows_configured_origin(self):
        """Response includes access-control-allow-origin for the configured FRONTEND_URL."""
        with TestClient(app) as client:
            response = client.get(
                "/health",
                headers={"Origin": "http://localhost:3000"},
            )
            assert response.headers.get("access-control-allow-origin") == "http://localhost:3000"

    def test_cors_preflight_request(self):
        with TestClient(app) as client:
            response = client.options(
                "/api/v1/import",
                headers={
                    "Origin": "http://localhost:3000",
                    "Access-Control-Request-Method": "POST",
                },
            )
            assert response.headers.get("access-control-allow-origin") == "http://localhost:3000"

    def test_cors_rejects_unknown_origin(self):
        with TestClient(app) as client:
            response = client.get(
                "/health",
                headers={"Origin": "http://evil.example.com"},
            )
            assert response.headers.get("access-control-allow-origin") != "http://evil.example.com"


class TestAppLifecycle:
    """Lifespan wires the database and services onto app.state."""

    def test_database_created_on_startup(self, _data_dir):
        with TestClient(app):
            assert (_data_dir / "tractionboard.db").exists()

    def test_state_populated(self):
        with TestClient(app):
            for name in ("settings", "db", "repos", "dashboard_service", "importer", "hub"):
                assert hasattr(app.state, name)

    def test_data_survives_restart(self):
        """SQLite is the source of truth across restarts."""
        with TestClient(app) as client:
            client.post("/api/v1/todos", json={"title": "Plan"})
        with TestClient(app) as client:
            todos = client.get("/api/v1/todos").json()
            assert [todo["title"] for todo in todos] == ["Plan"]


class TestRoutersMounted:

    def test_api_v1_router_mounted(self):
        with TestClient(app) as client:
            assert client.get("/api/v1/dashboard").status_code == 200
            assert client.get("/api/v1/nonexistent").status_code == 404

    def test_ws_router_mounted(self):
        with TestClient(app) as client:
            with client.websocket_connect("/ws/dashboard") as ws:
                assert ws.receive_json()["type"] == "initial-data"
