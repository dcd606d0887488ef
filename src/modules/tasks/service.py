"""Task service: creation rules, status lifecycle, and storage coordination."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from src.core.errors import ConflictError, NotFoundError, PersistenceError, Result, TaskError, ValidationError
from src.core.logging import log_with_actor_context, span
from src.domain.task import Task, TaskCreate, TaskPatch, TaskStatus
from src.modules.tasks import state_machine
from src.modules.tasks.query import compose_filter, compose_query
from src.modules.tasks.repository import TaskRepository


logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", TaskCreate, TaskPatch)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def _parse_input(model: type[M], data: M | Mapping[str, Any]) -> M:
    """Validate raw input into a model, reporting the first offending field."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        reason = f"{field}: {first['msg']}" if field else first["msg"]
        raise ValidationError(reason, field=field) from e


class TaskOrchestrator:
    """Owns task business rules on top of a TaskRepository.

    Every public operation returns a Result; nothing raises to the caller.
    Storage failures are wrapped in PersistenceError with the operation name.
    """

    def __init__(self, repository: TaskRepository, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._repository = repository
        self._clock = clock

    async def _storage(self, operation: str, call: Awaitable[T], *, task_id: str | None = None) -> T:
        """Await a repository call, wrapping unexpected failures in PersistenceError."""
        try:
            return await call
        except TaskError:
            raise
        except Exception as e:
            logger.error(
                "Task storage call failed",
                extra={"operation": operation, "task_id": task_id, "error": str(e)},
            )
            raise PersistenceError(e, operation=operation, task_id=task_id) from e

    async def create_task(
        self,
        data: TaskCreate | Mapping[str, Any],
        *,
        actor_id: str | None = None,
    ) -> Result[Task]:
        """Create a task in the todo state.

        Args:
            data: Title (required), description, assignee, due_date
            actor_id: Authenticated user creating the task

        Returns:
            Result with the stored task, or ValidationError / PersistenceError
        """
        with span("task_service.create_task"):
            try:
                payload = _parse_input(TaskCreate, data)
                now = self._clock()

                if payload.due_date is not None and payload.due_date < now:
                    msg = f"due_date {payload.due_date.isoformat()} is in the past"
                    raise ValidationError(msg, field="due_date")

                task = Task(
                    title=payload.title,
                    description=payload.description,
                    status=state_machine.INITIAL_STATUS,
                    assignee=payload.assignee,
                    due_date=payload.due_date,
                    created_by=actor_id,
                    created_at=now,
                    updated_at=now,
                )
                created = await self._storage("insert", self._repository.insert(task))
            except TaskError as e:
                return Result.failure(e)

            log_with_actor_context(logger, "info", "Created task", actor_id=actor_id, task_id=created.id)
            return Result.success(created)

    async def get_task(self, task_id: str) -> Result[Task]:
        """Fetch a single task by ID."""
        with span("task_service.get_task"):
            try:
                task = await self._storage("find_by_id", self._repository.find_by_id(task_id), task_id=task_id)
            except TaskError as e:
                return Result.failure(e)

            if task is None:
                return Result.failure(NotFoundError(task_id))
            return Result.success(task)

    async def update_task(
        self,
        task_id: str,
        patch: TaskPatch | Mapping[str, Any],
        *,
        actor_id: str | None = None,
    ) -> Result[Task]:
        """Apply a partial update, validating any status change.

        Fields other than status overwrite unconditionally; due_date is not
        re-checked against the current time. The write is guarded by the
        version that was read, so a concurrent update yields ConflictError.

        Returns:
            Result with the merged task, or ValidationError / NotFoundError /
            ConflictError / PersistenceError
        """
        with span("task_service.update_task"):
            try:
                changes = _parse_input(TaskPatch, patch).changes()
                current = await self._storage("find_by_id", self._repository.find_by_id(task_id), task_id=task_id)
                if current is None:
                    raise NotFoundError(task_id)

                target: TaskStatus | None = changes.get("status")  # type: ignore[assignment]
                if target is not None:
                    state_machine.validate_transition(task_id=task_id, current=current.status, target=target)

                changes["updated_at"] = max(self._clock(), current.updated_at, current.created_at)
                updated = await self._storage(
                    "update_by_id",
                    self._repository.update_by_id(task_id, changes, expected_version=current.version),
                    task_id=task_id,
                )
                if updated is None:
                    raise NotFoundError(task_id)
            except ConflictError as e:
                log_with_actor_context(logger, "warning", "Task update conflict", actor_id=actor_id, task_id=task_id)
                return Result.failure(e)
            except TaskError as e:
                return Result.failure(e)

            if target is not None and target != current.status:
                log_with_actor_context(
                    logger,
                    "info",
                    "Task status changed",
                    actor_id=actor_id,
                    task_id=task_id,
                    from_status=str(current.status),
                    to_status=str(target),
                )
            else:
                log_with_actor_context(logger, "info", "Updated task", actor_id=actor_id, task_id=task_id)
            return Result.success(updated)

    async def delete_task(self, task_id: str, *, actor_id: str | None = None) -> Result[bool]:
        """Delete a task. Deleting a missing task is NotFoundError, never a silent success."""
        with span("task_service.delete_task"):
            try:
                current = await self._storage("find_by_id", self._repository.find_by_id(task_id), task_id=task_id)
                if current is None:
                    raise NotFoundError(task_id)

                removed = await self._storage("delete_by_id", self._repository.delete_by_id(task_id), task_id=task_id)
                # Deleted by someone else between the read and the delete
                if not removed:
                    raise NotFoundError(task_id)
            except TaskError as e:
                return Result.failure(e)

            log_with_actor_context(logger, "info", "Deleted task", actor_id=actor_id, task_id=task_id)
            return Result.success(True)

    async def list_tasks(
        self,
        raw_filter: Mapping[str, Any] | None = None,
        raw_pagination: Mapping[str, Any] | None = None,
    ) -> Result[list[Task]]:
        """List tasks with a single storage read after query validation.

        Invalid filter, pagination or sort input fails before storage is touched.
        """
        with span("task_service.list_tasks"):
            try:
                descriptor = compose_query(raw_filter, raw_pagination)
                tasks = await self._storage("find", self._repository.find(descriptor))
            except TaskError as e:
                return Result.failure(e)

            logger.debug(
                "Listed tasks",
                extra={"count": len(tasks), "page": descriptor.page, "limit": descriptor.limit},
            )
            return Result.success(tasks)

    async def count_tasks(self, raw_filter: Mapping[str, Any] | None = None) -> Result[int]:
        """Count tasks matching a filter validated like list_tasks."""
        with span("task_service.count_tasks"):
            try:
                task_filter = compose_filter(raw_filter)
                total = await self._storage("count", self._repository.count(task_filter))
            except TaskError as e:
                return Result.failure(e)

            return Result.success(total)
