"""Tests for the /api/health endpoint."""

from quickcourt.config import APP_VERSION
from quickcourt.main import app


def test_health_returns_ok(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200

    data = resp.json()
    assert data["status"] == "OK"
    assert data["database"] == "Connected"
    assert data["version"] == APP_VERSION
    assert data["uptime"] >= 0
    assert "timestamp" in data


def test_health_reports_disconnected_database(client):
    client.portal.call(app.state.database.close)

    resp = client.get("/api/health")
    assert resp.status_code == 503
    data = resp.json()
    assert data["status"] == "ERROR"
    assert data["database"] == "Disconnected"
