"""Pytest configuration and fixtures for unit tests."""

import pytest

from src.modules.tasks.service import TaskOrchestrator
from tests.unit.mocks import FakeClock, InMemoryTaskRepository


@pytest.fixture
def clock():
    """Provides a clock starting at 2026-01-01 09:00 UTC, one second per reading."""
    return FakeClock()


@pytest.fixture
def in_memory_repo():
    """Provides a fresh InMemoryTaskRepository for each test."""
    return InMemoryTaskRepository()


@pytest.fixture
def orchestrator(in_memory_repo, clock):
    """TaskOrchestrator wired to the in-memory repository and fake clock."""
    return TaskOrchestrator(in_memory_repo, clock=clock)


@pytest.fixture
def sample_task_data():
    """Returns sample task input for testing."""
    return {
        "title": "Write quarterly report",
        "description": "Summarize Q3 numbers",
        "assignee": "user-42",
    }
