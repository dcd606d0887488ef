"""TaskRepository backed by the aiosqlite db_client."""

import logging
import uuid
from datetime import datetime
from typing import Any

from src.core import db_client
from src.core.errors import ConflictError
from src.domain.query import QueryDescriptor, TaskFilter
from src.domain.task import Task


logger = logging.getLogger(__name__)

COLLECTION = "tasks"


def _serialize(fields: dict[str, Any]) -> dict[str, Any]:
    """Fix timestamp precision so stored ISO strings compare in time order."""
    return {
        key: value.isoformat(timespec="microseconds") if isinstance(value, datetime) else value
        for key, value in fields.items()
    }


def _filters(task_filter: TaskFilter) -> dict[str, Any]:
    return task_filter.model_dump(exclude_none=True)


class SqliteTaskRepository:
    """Stores tasks in the ``tasks`` table created by TasksModule."""

    def __init__(self, *, db_path: str | None = None) -> None:
        self._db_path = db_path

    async def find(self, descriptor: QueryDescriptor) -> list[Task]:
        records = await db_client.list_records(
            collection=COLLECTION,
            filters=_filters(descriptor.filter),
            sort=descriptor.sort_key,
            descending=descriptor.descending,
            limit=descriptor.limit,
            offset=descriptor.offset,
            db_path=self._db_path,
        )
        return [Task.model_validate(record) for record in records]

    async def find_by_id(self, task_id: str) -> Task | None:
        try:
            record = await db_client.get_record(collection=COLLECTION, record_id=task_id, db_path=self._db_path)
        except db_client.RecordNotFoundError:
            return None
        return Task.model_validate(record)

    async def insert(self, task: Task) -> Task:
        if not task.id:
            task = task.model_copy(update={"id": uuid.uuid4().hex})

        record = await db_client.create_record(
            collection=COLLECTION,
            data=_serialize(task.model_dump(mode="python")),
            db_path=self._db_path,
        )
        return Task.model_validate(record)

    async def update_by_id(
        self,
        task_id: str,
        fields: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Task | None:
        current = await self.find_by_id(task_id)
        if current is None:
            return None

        version = current.version if expected_version is None else expected_version
        data = _serialize({**fields, "version": version + 1})

        changed = await db_client.update_record(
            collection=COLLECTION,
            record_id=task_id,
            data=data,
            match={"version": version},
            db_path=self._db_path,
        )
        if changed == 0:
            if await self.find_by_id(task_id) is None:
                return None
            logger.warning("Version conflict on task update", extra={"task_id": task_id, "expected": version})
            raise ConflictError(task_id, version)

        return await self.find_by_id(task_id)

    async def delete_by_id(self, task_id: str) -> bool:
        try:
            await db_client.delete_record(collection=COLLECTION, record_id=task_id, db_path=self._db_path)
        except db_client.RecordNotFoundError:
            return False
        return True

    async def count(self, task_filter: TaskFilter) -> int:
        return await db_client.count_records(
            collection=COLLECTION,
            filters=_filters(task_filter),
            db_path=self._db_path,
        )
