"""SQLite database client wrapper with CRUD operations."""

import asyncio
import json
import logging
import re
import threading
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import aiosqlite

from src.core.config import settings


logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when a database operation fails."""


class RecordNotFoundError(DatabaseError, KeyError):
    """Raised when a record does not exist."""


_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def _validate_identifier(name: str, *, kind: str = "collection") -> None:
    """Validate that a table or column name contains only alphanumeric characters and underscores."""
    if not _IDENTIFIER.match(name):
        msg = f"Invalid {kind} name: {name}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def _to_db_value(value: Any) -> Any:
    """Convert Python values into something SQLite can bind."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict | list):
        return json.dumps(value)
    return value


def _where_clause(filters: dict[str, Any] | None) -> tuple[str, list[Any]]:
    """Build an equality-only WHERE clause from a column/value mapping."""
    if not filters:
        return "", []

    conditions = []
    params = []
    for column, value in filters.items():
        _validate_identifier(column, kind="column")
        if value is None:
            conditions.append(f"{column} IS NULL")
        else:
            conditions.append(f"{column} = ?")
            params.append(_to_db_value(value))

    return f"WHERE {' AND '.join(conditions)}", params


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


def _cache_key(db_path: str | None) -> tuple[int, int, str]:
    loop = asyncio.get_running_loop()
    return threading.get_ident(), id(loop), str(get_db_path(db_path))


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    cache_key = _cache_key(db_path)

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    # Create new connection with async lock to prevent races
    async with _db_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path = get_db_path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA foreign_keys = ON")
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": cache_key[0], "loop_id": cache_key[1]},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    cache_key = _cache_key(db_path)

    if cache_key not in _db_connections:
        return

    async with _db_lock:
        conn = _db_connections.pop(cache_key, None)
        if conn is None:
            return
        try:
            await conn.close()
        except aiosqlite.Error as e:
            logger.warning("Error closing SQLite connection", extra={"error": str(e), "db_path": cache_key[2]})
            return

    logger.info("Closed SQLite connection", extra={"db_path": cache_key[2]})


async def init_db(*, db_path: str | None = None) -> None:
    """Initialize the database schema by delegating to schema.init_db()."""
    from src.core import schema

    await schema.init_db(db_path=db_path)


def _row_to_dict(cursor: aiosqlite.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    columns = [description[0] for description in cursor.description]
    return dict(zip(columns, row, strict=True))


async def create_record(*, collection: str, data: dict[str, Any], db_path: str | None = None) -> dict[str, Any]:
    """Insert a new record and return it as stored. The data must include its id."""
    try:
        _validate_identifier(collection)
        for column in data:
            _validate_identifier(column, kind="column")
        conn = await get_connection(db_path=db_path)

        columns_str = ", ".join(data)
        placeholders_str = ", ".join("?" for _ in data)
        values = [_to_db_value(v) for v in data.values()]

        query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - identifiers are validated
        await conn.execute(query, values)
        await conn.commit()

        logger.info("Created record", extra={"collection": collection, "record_id": data.get("id")})
        return await get_record(collection=collection, record_id=str(data["id"]), db_path=db_path)
    except Exception as e:
        if isinstance(e, aiosqlite.OperationalError) and "no such table" in str(e):
            logger.error("Table not found", extra={"collection": collection})
            msg = f"Table '{collection}' does not exist. Call init_db() first."
            raise DatabaseError(msg) from e
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def get_record(*, collection: str, record_id: str, db_path: str | None = None) -> dict[str, Any]:
    """Fetch a single record by ID, raising RecordNotFoundError if not found."""
    try:
        _validate_identifier(collection)
        conn = await get_connection(db_path=db_path)

        query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (record_id,))
        row = await cursor.fetchone()

        if row is None:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.debug("Retrieved record", extra={"collection": collection, "record_id": record_id})
        return _row_to_dict(cursor, row)
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to get record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def update_record(
    *,
    collection: str,
    record_id: str,
    data: dict[str, Any],
    match: dict[str, Any] | None = None,
    db_path: str | None = None,
) -> int:
    """Update a record by ID and return the number of rows changed.

    Extra equality conditions in match guard the write (e.g. a version check);
    zero rows changed means the record is missing or a guard did not hold.
    """
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    try:
        _validate_identifier(collection)
        for column in data:
            _validate_identifier(column, kind="column")
        conn = await get_connection(db_path=db_path)

        set_clause = ", ".join(f"{key} = ?" for key in data)
        where_clause, where_params = _where_clause({"id": record_id, **(match or {})})
        values = [_to_db_value(v) for v in data.values()] + where_params

        query = f"UPDATE {collection} SET {set_clause} {where_clause}"  # noqa: S608 - identifiers are validated
        cursor = await conn.execute(query, values)
        await conn.commit()

        logger.info(
            "Updated record",
            extra={"collection": collection, "record_id": record_id, "rowcount": cursor.rowcount},
        )
        return cursor.rowcount
    except Exception as e:
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def delete_record(*, collection: str, record_id: str, db_path: str | None = None) -> None:
    """Delete a record by ID, raising RecordNotFoundError if not found."""
    try:
        _validate_identifier(collection)
        conn = await get_connection(db_path=db_path)

        query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (record_id,))
        await conn.commit()

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to delete record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def list_records(  # noqa: PLR0913
    *,
    collection: str,
    filters: dict[str, Any] | None = None,
    sort: str = "id",
    descending: bool = False,
    limit: int = 50,
    offset: int = 0,
    db_path: str | None = None,
) -> list[dict[str, Any]]:
    """List records with equality filters, a single sort column, and pagination.

    NULLs in the sort column always come last; ties are broken by id ascending.
    """
    try:
        _validate_identifier(collection)
        _validate_identifier(sort, kind="column")
        conn = await get_connection(db_path=db_path)

        where_clause, params = _where_clause(filters)
        direction = "DESC" if descending else "ASC"
        order_by = f"{sort} IS NULL, {sort} {direction}, id ASC"

        query = f"SELECT * FROM {collection} {where_clause} ORDER BY {order_by} LIMIT ? OFFSET ?"  # noqa: S608 - identifiers are validated
        cursor = await conn.execute(query, [*params, limit, offset])
        rows = await cursor.fetchall()

        records = [_row_to_dict(cursor, row) for row in rows]

        logger.debug("Listed records", extra={"collection": collection, "count": len(records)})
        return records
    except Exception as e:
        logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to list records from {collection}: {e}"
        raise DatabaseError(msg) from e


async def count_records(
    *,
    collection: str,
    filters: dict[str, Any] | None = None,
    db_path: str | None = None,
) -> int:
    """Count records matching equality filters."""
    try:
        _validate_identifier(collection)
        conn = await get_connection(db_path=db_path)

        where_clause, params = _where_clause(filters)
        query = f"SELECT COUNT(*) FROM {collection} {where_clause}"  # noqa: S608 - identifiers are validated
        cursor = await conn.execute(query, params)
        row = await cursor.fetchone()
        return int(row[0]) if row else 0
    except Exception as e:
        logger.error("count_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to count records in {collection}: {e}"
        raise DatabaseError(msg) from e
