"""Normalized list-query models."""

from pydantic import BaseModel, ConfigDict, Field

from src.domain.task import TaskStatus


class TaskFilter(BaseModel):
    """Equality filters recognized for task listings."""

    model_config = ConfigDict(frozen=True)

    status: TaskStatus | None = None


class QueryDescriptor(BaseModel):
    """Validated filter, pagination and sort for a single list read."""

    model_config = ConfigDict(frozen=True)

    filter: TaskFilter = Field(default_factory=TaskFilter)
    page: int = Field(..., ge=1)
    offset: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    sort_key: str = Field(..., description="Task attribute name to order by")
    descending: bool = False
