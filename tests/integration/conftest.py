"""Fixtures for tests against a real SQLite file."""

import pytest

from src.core import db_client
from src.modules.tasks.sqlite_repository import SqliteTaskRepository


@pytest.fixture
async def sqlite_db_path(tmp_path):
    """Initialized throwaway database; the connection is closed afterwards."""
    path = str(tmp_path / "tasks.db")
    await db_client.init_db(db_path=path)
    yield path
    await db_client.close_connection(db_path=path)


@pytest.fixture
def sqlite_repo(sqlite_db_path):
    """SqliteTaskRepository over the throwaway database."""
    return SqliteTaskRepository(db_path=sqlite_db_path)
