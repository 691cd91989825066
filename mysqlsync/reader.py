"""Forward-only, paginated row streaming from the source schema.

Rows are pulled with ``fetchmany`` so a page is never materialised in
memory as a whole; one row of look-ahead tells the callback whether it is
seeing the last row of the page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generator, Iterator, Optional, Sequence, Tuple

from . import queries
from ._constants import DEFAULT_FETCH_SIZE
from .errors import RowStreamFailure, SyncError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@dataclass(frozen=True)
class ResultPosition:
    """Where a row sits in the stream.

    ``is_first_row``, ``is_last_row`` and ``row`` (1-based) are relative to
    the current query, i.e. the current page.  ``is_first_page`` is supplied
    by the caller and is only true for the first page of a table.
    """

    is_first_row: bool
    is_last_row: bool
    row: int
    is_first_page: bool = True


RowCallback = Callable[[Row, ResultPosition], None]


def normalize_timestamp(value: Any) -> Any:
    """Make aware datetimes naive UTC so values compare across time zones."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def build_row(description: Sequence[Tuple[Any, ...]], values: Sequence[Any]) -> Row:
    """Zip ``cursor.description`` column names with *values*, in order."""
    return {col[0]: normalize_timestamp(v) for col, v in zip(description, values)}


def _iter_cursor(cursor: Any, fetch_size: int) -> Generator[Tuple, None, None]:
    """Yield rows from *cursor* in batches of *fetch_size* without
    materialising the entire result set in memory."""
    while True:
        batch = cursor.fetchmany(fetch_size)
        if not batch:
            break
        yield from batch


def _with_last(rows: Iterator[Any]) -> Generator[Tuple[Any, bool], None, None]:
    """Yield ``(row, is_last)`` pairs using one row of look-ahead."""
    try:
        current = next(rows)
    except StopIteration:
        return
    for nxt in rows:
        yield current, False
        current = nxt
    yield current, True


def stream(
    cursor: Any,
    query: str,
    on_row: RowCallback,
    *,
    params: Optional[Sequence[Any]] = None,
    is_first_page: bool = True,
    fetch_size: int = DEFAULT_FETCH_SIZE,
) -> int:
    """Execute *query* and call *on_row* for every row; return the row count.

    Any failure, in the query or in the callback, aborts the stream.
    """
    logger.debug("Query: %s", query)
    count = 0
    try:
        if params:
            cursor.execute(query, tuple(params))
        else:
            cursor.execute(query)
        description = cursor.description
        for values, is_last in _with_last(_iter_cursor(cursor, fetch_size)):
            count += 1
            position = ResultPosition(
                is_first_row=count == 1,
                is_last_row=is_last,
                row=count,
                is_first_page=is_first_page,
            )
            on_row(build_row(description, values), position)
    except SyncError:
        raise
    except Exception as exc:
        raise RowStreamFailure(f"Error while streaming query {query}: {exc}") from exc
    return count


def paginate(
    cursor: Any,
    schema: str,
    table: str,
    columns: Sequence[str],
    page_size: int,
    on_row: RowCallback,
    *,
    fetch_size: int = DEFAULT_FETCH_SIZE,
) -> int:
    """Stream *schema.table* page by page until a page comes back empty.

    Returns the total number of rows seen.
    """
    offset = 0
    total = 0
    while True:
        logger.info(
            "Fetching a maximum of %d rows from %s starting with row %d",
            page_size, table, offset,
        )
        sql = queries.build_page_query(schema, table, columns, offset, page_size)
        n = stream(
            cursor, sql, on_row,
            is_first_page=offset == 0,
            fetch_size=min(fetch_size, page_size),
        )
        if n == 0:
            break
        total += n
        offset += page_size
    return total
