"""Status transition rules for the task lifecycle."""

import logging

from src.core.errors import ErrorCode, ValidationError
from src.domain.task import TaskStatus


logger = logging.getLogger(__name__)


# Cyclic on purpose: completed work can be reopened, so no state is terminal.
ALLOWED_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.TODO: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED, TaskStatus.TODO}),
    TaskStatus.COMPLETED: frozenset({TaskStatus.IN_PROGRESS}),
}

INITIAL_STATUS = TaskStatus.TODO


def can_transition(*, current: TaskStatus, target: TaskStatus) -> bool:
    """Return True if moving from current to target is allowed. Staying put always is."""
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def validate_transition(*, task_id: str, current: TaskStatus, target: TaskStatus) -> None:
    """Raise ValidationError naming both states when the transition is not allowed."""
    if can_transition(current=current, target=target):
        return

    allowed = ", ".join(sorted(ALLOWED_TRANSITIONS[current])) or "none"
    msg = f"Cannot move task {task_id} from {current} to {target} (allowed from {current}: {allowed})"
    logger.info(
        "Rejected status transition",
        extra={"task_id": task_id, "from_status": str(current), "to_status": str(target)},
    )
    raise ValidationError(msg, field="status", code=ErrorCode.ERR_INVALID_STATE_TRANSITION)
