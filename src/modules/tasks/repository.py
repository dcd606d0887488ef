"""Storage contract the task service depends on."""

from typing import Any, Protocol, runtime_checkable

from src.domain.query import QueryDescriptor, TaskFilter
from src.domain.task import Task


@runtime_checkable
class TaskRepository(Protocol):
    """Persistence boundary for tasks.

    Each call touches one record or runs one query and must be atomic on its
    own. The service never spans a transaction across calls.
    """

    async def find(self, descriptor: QueryDescriptor) -> list[Task]:
        """Return tasks matching the descriptor's filter, sorted and paginated."""
        ...

    async def find_by_id(self, task_id: str) -> Task | None:
        """Return a task by id, or None when missing."""
        ...

    async def insert(self, task: Task) -> Task:
        """Store a new task, assigning an id if it has none, and return it."""
        ...

    async def update_by_id(
        self,
        task_id: str,
        fields: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Task | None:
        """Overwrite fields on a task and return it, or None when missing.

        When expected_version is given the write only applies if the stored
        version still matches; otherwise ConflictError is raised. A successful
        write increments the version.
        """
        ...

    async def delete_by_id(self, task_id: str) -> bool:
        """Remove a task. Returns False when it did not exist."""
        ...

    async def count(self, task_filter: TaskFilter) -> int:
        """Count tasks matching the filter."""
        ...
