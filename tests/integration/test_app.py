"""Integration tests for the assembled FastAPI application."""

import pytest
from fastapi.testclient import TestClient

from src.core.config import settings
from src.main import app


@pytest.fixture
def app_client(tmp_path, monkeypatch):
    """Run the real lifespan against a temporary database file."""
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "app.db"))
    with TestClient(app) as client:
        yield client


@pytest.mark.integration
def test_health(app_client):
    """Test the health endpoint."""
    response = app_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.integration
def test_task_round_trip(app_client):
    """Create, move, list, and delete a task through the HTTP API."""
    created = app_client.post("/tasks", json={"title": "Through the API"}, headers={"X-Actor-Id": "u-1"})
    assert created.status_code == 201
    task_id = created.json()["id"]

    moved = app_client.patch(f"/tasks/{task_id}", json={"status": "in-progress"})
    assert moved.status_code == 200

    listed = app_client.get("/tasks", params={"status": "in-progress"})
    assert [t["id"] for t in listed.json()] == [task_id]

    assert app_client.delete(f"/tasks/{task_id}").status_code == 200
    assert app_client.get(f"/tasks/{task_id}").status_code == 404
