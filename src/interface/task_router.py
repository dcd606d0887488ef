"""HTTP endpoints for task records.

Thin layer only: reads the actor id, hands parsed input to the TaskOrchestrator,
and maps Result errors to status codes.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Header, Request
from fastapi.responses import JSONResponse, Response

from src.core.config import constants
from src.core.errors import PersistenceError, Result, TaskError, to_error_response
from src.domain.task import Task
from src.modules.tasks.query import PAGINATION_KEYS
from src.modules.tasks.service import TaskOrchestrator


router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)


def get_orchestrator(request: Request) -> TaskOrchestrator:
    """Return the orchestrator wired up during application startup."""
    return request.app.state.task_orchestrator


def _error_response(error: TaskError) -> JSONResponse:
    if isinstance(error, PersistenceError):
        logger.error(
            "Task request failed in storage",
            extra={"operation": error.operation, "task_id": error.task_id, "error": str(error.cause)},
        )
    return JSONResponse(content=to_error_response(error).model_dump(mode="json"), status_code=error.http_status)


def _task_body(task: Task) -> dict[str, Any]:
    return task.model_dump(mode="json", by_alias=True)


def _respond(result: Result[Any], *, status_code: int = constants.HTTP_OK) -> Response:
    if result.error is not None:
        return _error_response(result.error)

    value = result.value
    if isinstance(value, Task):
        content: Any = _task_body(value)
    elif isinstance(value, list):
        content = [_task_body(task) for task in value]
    else:
        content = value
    return JSONResponse(content=content, status_code=status_code)


@router.post("")
async def create_task(
    payload: dict[str, Any] = Body(...),
    actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
    orchestrator: TaskOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Create a task on behalf of the calling actor."""
    result = await orchestrator.create_task(payload, actor_id=actor_id)
    return _respond(result, status_code=constants.HTTP_CREATED)


@router.get("")
async def list_tasks(request: Request, orchestrator: TaskOrchestrator = Depends(get_orchestrator)) -> Response:
    """List tasks. Query keys other than page/limit/sort/order are treated as filters."""
    params = dict(request.query_params)
    raw_pagination = {key: value for key, value in params.items() if key in PAGINATION_KEYS}
    raw_filter = {key: value for key, value in params.items() if key not in PAGINATION_KEYS}

    result = await orchestrator.list_tasks(raw_filter, raw_pagination)
    if result.error is not None:
        return _error_response(result.error)

    total = await orchestrator.count_tasks(raw_filter)
    response = _respond(result)
    if total.ok:
        response.headers["X-Total-Count"] = str(total.value)
    else:
        logger.warning(
            "Task count failed; X-Total-Count omitted",
            extra={"error_code": total.error.code, "error": str(total.error)},
        )
    return response


@router.get("/{task_id}")
async def get_task(task_id: str, orchestrator: TaskOrchestrator = Depends(get_orchestrator)) -> Response:
    """Fetch one task."""
    return _respond(await orchestrator.get_task(task_id))


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    payload: dict[str, Any] = Body(...),
    actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
    orchestrator: TaskOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Partially update a task, including status transitions."""
    return _respond(await orchestrator.update_task(task_id, payload, actor_id=actor_id))


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
    orchestrator: TaskOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Delete a task. A second delete of the same id returns 404."""
    result = await orchestrator.delete_task(task_id, actor_id=actor_id)
    if result.error is not None:
        return _error_response(result.error)
    return JSONResponse(content={"deleted": True, "id": task_id}, status_code=constants.HTTP_OK)
