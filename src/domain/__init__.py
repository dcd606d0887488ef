"""Domain models and DTOs."""

from src.domain.query import QueryDescriptor, TaskFilter
from src.domain.task import Task, TaskCreate, TaskPatch, TaskStatus


__all__ = [
    "QueryDescriptor",
    "Task",
    "TaskCreate",
    "TaskFilter",
    "TaskPatch",
    "TaskStatus",
]
