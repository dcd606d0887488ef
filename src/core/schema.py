"""SQLite schema management (code-first, assembled from registered modules)."""

import logging

from src.core import db_client
from src.core.module_registry import get_all_indexes, get_all_table_schemas, get_modules, register_module


logger = logging.getLogger(__name__)


def register_default_modules() -> None:
    """Register the built-in feature modules if they are not registered yet."""
    from src.modules.tasks import TasksModule

    module = TasksModule()
    if module.name not in get_modules():
        register_module(module)


async def init_db(*, db_path: str | None = None) -> None:
    """Create every registered module's tables and indexes if they do not exist."""
    register_default_modules()

    conn = await db_client.get_connection(db_path=db_path)
    schemas = get_all_table_schemas()
    for table_name, statement in schemas.items():
        await conn.execute(statement)
        logger.debug("Ensured table", extra={"table": table_name})

    for statement in get_all_indexes():
        await conn.execute(statement)

    await conn.commit()
    logger.info("Database schema initialized", extra={"tables": sorted(schemas)})
