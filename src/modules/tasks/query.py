"""Normalization of raw list-request input into a QueryDescriptor.

Everything here is pure: identical input always yields an identical descriptor,
and nothing touches storage.
"""

import re
from collections.abc import Mapping
from typing import Any

from src.core.config import constants, settings
from src.core.errors import ErrorCode, ValidationError
from src.domain.query import QueryDescriptor, TaskFilter
from src.domain.task import TaskStatus


PAGINATION_KEYS = frozenset({"page", "limit", "sort", "order"})
SORT_ORDERS = {"asc": False, "desc": True}
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def _invalid(reason: str, field: str) -> ValidationError:
    return ValidationError(reason, field=field, code=ErrorCode.ERR_INVALID_QUERY)


def _parse_int(value: Any, *, field: str) -> int:
    """Accept ints and integer strings (query-string input); reject everything else."""
    if isinstance(value, bool):
        raise _invalid(f"{field} must be an integer, got {value!r}", field)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and INTEGER_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise _invalid(f"{field} must be an integer, got {value!r}", field)


def _resolve_sort_key(name: str) -> str:
    """Map a public or attribute sort name onto the task attribute it orders by."""
    if name in constants.SORTABLE_FIELDS:
        return constants.SORTABLE_FIELDS[name]
    if name in constants.SORTABLE_FIELDS.values():
        return name
    allowed = ", ".join(constants.SORTABLE_FIELDS)
    raise _invalid(f"Unknown sort key '{name}' (allowed: {allowed})", "sort")


def compose_filter(raw_filter: Mapping[str, Any] | None) -> TaskFilter:
    """Validate equality filters. Only status is recognized; None means unfiltered."""
    raw_filter = raw_filter or {}

    unknown = sorted(set(raw_filter) - constants.FILTERABLE_FIELDS)
    if unknown:
        raise _invalid(f"Unknown filter key(s): {', '.join(unknown)}", unknown[0])

    status = raw_filter.get("status")
    if status is None:
        return TaskFilter()

    try:
        return TaskFilter(status=TaskStatus(status))
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise _invalid(f"Unknown status '{status}' (allowed: {allowed})", "status") from None


def compose_sort(raw_sort: Any, raw_order: Any) -> tuple[str, bool]:
    """Return (attribute, descending). A leading '-' or order='desc' sorts descending."""
    descending = False

    if raw_order is not None:
        order = str(raw_order).strip().lower()
        if order not in SORT_ORDERS:
            raise _invalid(f"Unknown sort order '{raw_order}' (allowed: asc, desc)", "order")
        descending = SORT_ORDERS[order]

    if raw_sort is None or raw_sort == "":
        return constants.DEFAULT_SORT_KEY, descending

    if not isinstance(raw_sort, str):
        raise _invalid(f"sort must be a string, got {raw_sort!r}", "sort")

    name = raw_sort.strip()
    if name.startswith("-"):
        descending = True
        name = name[1:]
    elif name.startswith("+"):
        name = name[1:]

    return _resolve_sort_key(name), descending


def compose_query(
    raw_filter: Mapping[str, Any] | None,
    raw_pagination: Mapping[str, Any] | None,
    *,
    default_limit: int | None = None,
    max_limit: int | None = None,
) -> QueryDescriptor:
    """Normalize filter, pagination and sort input into one descriptor.

    Args:
        raw_filter: Equality filters, e.g. {"status": "todo"}
        raw_pagination: page, limit, sort and order, all optional
        default_limit: Page size when limit is omitted (defaults to settings)
        max_limit: Upper clamp for limit (defaults to settings)

    Returns:
        The validated QueryDescriptor

    Raises:
        ValidationError: On unknown filter/pagination/sort keys, page < 1,
            a page whose offset storage cannot address, non-integer
            page/limit, or an unknown status/order value
    """
    default_limit = default_limit or settings.default_page_size
    max_limit = max_limit or settings.max_page_size
    raw_pagination = raw_pagination or {}

    unknown = sorted(set(raw_pagination) - PAGINATION_KEYS)
    if unknown:
        raise _invalid(f"Unknown pagination key(s): {', '.join(unknown)}", unknown[0])

    task_filter = compose_filter(raw_filter)

    raw_page = raw_pagination.get("page")
    page = constants.DEFAULT_PAGE if raw_page is None else _parse_int(raw_page, field="page")
    if page < 1:
        raise _invalid(f"page must be >= 1, got {page}", "page")

    raw_limit = raw_pagination.get("limit")
    limit = default_limit if raw_limit is None else _parse_int(raw_limit, field="limit")
    limit = max(constants.MIN_PAGE_SIZE, min(limit, max_limit))

    offset = (page - 1) * limit
    if offset > constants.MAX_OFFSET:
        raise _invalid(f"page {page} is too large for page size {limit}", "page")

    sort_key, descending = compose_sort(raw_pagination.get("sort"), raw_pagination.get("order"))

    return QueryDescriptor(
        filter=task_filter,
        page=page,
        offset=offset,
        limit=limit,
        sort_key=sort_key,
        descending=descending,
    )
