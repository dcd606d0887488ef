"""Unit tests for the task HTTP endpoints."""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.interface.task_router import router
from src.modules.tasks.service import TaskOrchestrator
from tests.unit.mocks import CountFailingTaskRepository, FailingTaskRepository, FakeClock


def _client_for(orchestrator: TaskOrchestrator) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.state.task_orchestrator = orchestrator
    return TestClient(app)


@pytest.fixture
def client(orchestrator):
    """TestClient for an app serving only the task router over the in-memory repository."""
    return _client_for(orchestrator)


def _create(client, title="Task", **fields):
    response = client.post("/tasks", json={"title": title, **fields}, headers={"X-Actor-Id": "actor-1"})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.unit
class TestTaskRouter:
    """Tests for the /tasks endpoints."""

    def test_create_returns_camel_case_task(self, client):
        """Test POST /tasks returns 201 with a camelCase body attributed to the actor."""
        body = _create(client, title="Plan sprint", dueDate="2030-01-01T00:00:00Z")

        assert body["title"] == "Plan sprint"
        assert body["status"] == "todo"
        assert body["createdBy"] == "actor-1"
        assert body["createdAt"] == body["updatedAt"]
        assert body["dueDate"].startswith("2030-01-01T00:00:00")

    def test_create_validation_error_is_400(self, client):
        """Test a blank title maps to 400 with the validation code."""
        response = client.post("/tasks", json={"title": "  "})

        assert response.status_code == 400
        assert response.json()["code"] == "ERR_VALIDATION"
        assert response.json()["category"] == "validation"

    def test_get_missing_is_404(self, client):
        """Test fetching an unknown id maps to 404."""
        response = client.get("/tasks/nope")

        assert response.status_code == 404
        assert response.json()["code"] == "ERR_TASK_NOT_FOUND"

    def test_patch_transition(self, client):
        """Test PATCH moves todo to in-progress and bumps the version."""
        task = _create(client)

        response = client.patch(f"/tasks/{task['id']}", json={"status": "in-progress"})

        assert response.status_code == 200
        assert response.json()["status"] == "in-progress"
        assert response.json()["version"] == 2

    def test_patch_forbidden_transition_is_400(self, client):
        """Test todo to completed is refused with the transition error code."""
        task = _create(client)

        response = client.patch(f"/tasks/{task['id']}", json={"status": "completed"})

        assert response.status_code == 400
        assert response.json()["code"] == "ERR_INVALID_STATE_TRANSITION"

    def test_delete_twice(self, client):
        """Test the first delete succeeds and the second returns 404."""
        task = _create(client)

        first = client.delete(f"/tasks/{task['id']}")
        second = client.delete(f"/tasks/{task['id']}")

        assert first.status_code == 200
        assert first.json() == {"deleted": True, "id": task["id"]}
        assert second.status_code == 404

    def test_list_with_pagination_and_total(self, client):
        """Test page 2 of size 5 returns tasks 6 to 10 and the total header."""
        for i in range(1, 13):
            _create(client, title=f"Task {i:02d}")

        response = client.get("/tasks", params={"page": 2, "limit": 5})

        assert response.status_code == 200
        assert [t["title"] for t in response.json()] == [f"Task {i:02d}" for i in range(6, 11)]
        assert response.headers["X-Total-Count"] == "12"

    def test_list_filter_by_status(self, client):
        """Test status in the query string filters both the page and the total."""
        task = _create(client, title="Started")
        _create(client, title="Waiting")
        client.patch(f"/tasks/{task['id']}", json={"status": "in-progress"})

        response = client.get("/tasks", params={"status": "in-progress"})

        assert [t["title"] for t in response.json()] == ["Started"]
        assert response.headers["X-Total-Count"] == "1"

    @pytest.mark.parametrize(
        "params",
        [
            {"priority": "high"},
            {"sort": "owner"},
            {"page": "0"},
            {"page": "--5"},
            {"page": "²"},
            {"page": "100000000000000000000"},
        ],
    )
    def test_list_invalid_query_is_400(self, client, params):
        """Test malformed list queries are client errors, not server errors."""
        response = client.get("/tasks", params=params)

        assert response.status_code == 400
        assert response.json()["code"] == "ERR_INVALID_QUERY"

    def test_storage_failure_is_500(self):
        """Test storage failures map to 500 without leaking the cause."""
        client = _client_for(TaskOrchestrator(FailingTaskRepository(), clock=FakeClock()))

        response = client.get("/tasks")

        assert response.status_code == 500
        assert response.json()["code"] == "ERR_PERSISTENCE"
        assert "database is locked" not in response.json()["message"]

    def test_count_failure_is_logged(self, caplog):
        """Test a failed count still returns the page, omits the total, and logs a warning."""
        client = _client_for(TaskOrchestrator(CountFailingTaskRepository(), clock=FakeClock()))
        _create(client, title="Only")

        with caplog.at_level(logging.WARNING, logger="src.interface.task_router"):
            response = client.get("/tasks")

        assert response.status_code == 200
        assert [t["title"] for t in response.json()] == ["Only"]
        assert "X-Total-Count" not in response.headers
        warnings = [r for r in caplog.records if r.name == "src.interface.task_router"]
        assert any("X-Total-Count omitted" in r.getMessage() for r in warnings)
