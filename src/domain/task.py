"""Task domain models and enums."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TaskStatus(StrEnum):
    """Task lifecycle status."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Task(BaseModel):
    """Task data transfer object."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default="", description="Unique task ID, assigned by storage on insert")
    title: str = Field(..., min_length=1, description="Task title")
    description: str | None = Field(default=None, description="Detailed task description")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="Current lifecycle status")
    assignee: str | None = Field(default=None, description="Assigned user ID (not validated)")
    due_date: datetime | None = Field(default=None, description="Due date (UTC)")
    created_by: str | None = Field(default=None, description="Actor ID that created the task")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")
    version: int = Field(default=1, ge=1, description="Optimistic concurrency version")

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def normalize_timezone(cls, v: datetime | None) -> datetime | None:
        """Store every timestamp as timezone-aware UTC."""
        return ensure_utc(v)


class TaskCreate(BaseModel):
    """Input for creating a task."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: str = Field(..., description="Task title")
    description: str | None = Field(default=None, description="Detailed task description")
    assignee: str | None = Field(default=None, description="Assigned user ID")
    due_date: datetime | None = Field(default=None, description="Due date")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject empty or whitespace-only titles."""
        v = v.strip()
        if not v:
            msg = "Title must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)


class TaskPatch(BaseModel):
    """Partial update for a task. Only fields explicitly set are applied."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    assignee: str | None = None
    due_date: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        if v is None:
            msg = "Title cannot be cleared"
            raise ValueError(msg)
        v = v.strip()
        if not v:
            msg = "Title must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: TaskStatus | None) -> TaskStatus:
        if v is None:
            msg = "Status cannot be cleared"
            raise ValueError(msg)
        return v

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)

    def changes(self) -> dict[str, object]:
        """Return only the fields the caller provided, keyed by attribute name."""
        return {name: getattr(self, name) for name in self.model_fields_set}
