"""Tasks module: task records, status lifecycle, and list queries."""


class TasksModule:
    """Tasks module for task record management.

    Provides:
    - Task CRUD operations with a status state machine
    - Filtered, sorted, paginated listings
    - Optimistic versioning for concurrent updates
    """

    @property
    def name(self) -> str:
        """Module name (unique identifier)."""
        return "tasks"

    @property
    def description(self) -> str:
        """Module description (human-readable)."""
        return "Task records with a todo / in-progress / completed lifecycle"

    def get_table_schemas(self) -> dict[str, str]:
        """Return table schemas for this module."""
        return {
            "tasks": """CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL CHECK (length(trim(title)) > 0),
        description TEXT,
        status TEXT NOT NULL DEFAULT 'todo'
            CHECK (status IN ('todo', 'in-progress', 'completed')),
        assignee TEXT,
        due_date TEXT,
        created_by TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL CHECK (updated_at >= created_at),
        version INTEGER NOT NULL DEFAULT 1
    )""",
        }

    def get_indexes(self) -> list[str]:
        """Return indexes for this module's tables."""
        return [
            "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks (status)",
            "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks (created_at)",
            "CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks (due_date)",
            "CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks (assignee)",
        ]
