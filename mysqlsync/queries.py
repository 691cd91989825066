"""SQL helpers for MySQL catalog and data queries.

All database-specific query text is isolated here so it can be tested
independently from the sync orchestration and I/O layers.  Metadata
queries raise :class:`~mysqlsync.errors.CatalogQueryFailure` on any driver
error.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ._constants import BOOKKEEPING_TABLES, EMPTY_WATERMARK
from .codec import armor, qualified
from .errors import CatalogQueryFailure


def _fetch_all(cursor: Any, sql: str, params: Sequence[Any] = ()) -> List[Tuple[Any, ...]]:
    """Execute a metadata query and return all rows."""
    try:
        if params:
            cursor.execute(sql, tuple(params))
        else:
            cursor.execute(sql)
        return [tuple(row) for row in cursor.fetchall()]
    except Exception as exc:
        raise CatalogQueryFailure(f"Error while executing query {sql}: {exc}") from exc


def list_tables(cursor: Any, schema: str) -> List[str]:
    """Return the names of all tables in *schema*, bookkeeping tables excluded."""
    placeholders = ", ".join("?" * len(BOOKKEEPING_TABLES))
    rows = _fetch_all(
        cursor,
        "SELECT t.TABLE_NAME FROM INFORMATION_SCHEMA.TABLES t "
        f"WHERE t.TABLE_SCHEMA = ? AND t.TABLE_NAME NOT IN ({placeholders}) "
        "ORDER BY 1",
        (schema, *sorted(BOOKKEEPING_TABLES)),
    )
    return [row[0] for row in rows]


def key_columns(
    cursor: Any, schema: str, tables: Iterable[str], *, primary: bool,
) -> Dict[str, List[str]]:
    """Return ``{table: [column, ...]}`` for primary (or non-primary) key columns.

    Every requested table that exists appears in the result, with an empty
    list when it has no matching column.  Columns keep their ordinal order.
    """
    tables = list(tables)
    if not tables:
        return {}
    placeholders = ", ".join("?" * len(tables))
    op = "=" if primary else "<>"
    rows = _fetch_all(
        cursor,
        "SELECT t.TABLE_NAME, c.COLUMN_NAME "
        "FROM INFORMATION_SCHEMA.TABLES t "
        "LEFT JOIN INFORMATION_SCHEMA.COLUMNS c "
        "ON c.TABLE_NAME = t.TABLE_NAME AND c.TABLE_SCHEMA = t.TABLE_SCHEMA "
        f"AND c.COLUMN_KEY {op} 'PRI' "
        f"WHERE t.TABLE_SCHEMA = ? AND t.TABLE_NAME IN ({placeholders}) "
        "ORDER BY t.TABLE_NAME, c.ORDINAL_POSITION",
        (schema, *tables),
    )
    result: Dict[str, List[str]] = {}
    for table, column in rows:
        cols = result.setdefault(table, [])
        if column is not None and column not in cols:
            cols.append(column)
    return result


def show_create_table(cursor: Any, schema: str, table: str) -> str:
    """Return the ``CREATE TABLE`` statement for *schema.table*."""
    rows = _fetch_all(cursor, f"SHOW CREATE TABLE {qualified(schema, table)}")
    if not rows:
        raise CatalogQueryFailure(f"SHOW CREATE TABLE returned nothing for {schema}.{table}")
    return rows[0][1]


def max_date(
    cursor: Any, schema: str, table: str, creation_column: str, modified_column: str,
) -> Optional[str]:
    """Return the greatest creation / last-modified date in *schema.table* as text.

    Empty tables yield the ``0000-01-01 00:00:00`` sentinel, so ``None`` only
    comes back when the query returns no row at all.
    """
    rows = _fetch_all(
        cursor,
        "SELECT CAST(GREATEST("
        f"IFNULL(MAX({armor(modified_column)}), '{EMPTY_WATERMARK}'), "
        f"IFNULL(MAX({armor(creation_column)}), '{EMPTY_WATERMARK}')"
        f") AS CHAR) AS max_date FROM {qualified(schema, table)}",
    )
    if not rows:
        return None
    return rows[0][0]


def _select(schema: str, table: str, columns: Sequence[str]) -> str:
    cols = ", ".join(armor(c) for c in columns)
    return f"SELECT {cols} FROM {qualified(schema, table)}"


def build_page_query(
    schema: str, table: str, columns: Sequence[str], offset: int, size: int,
) -> str:
    """Return the SQL for one page of a full table scan.

    No ``ORDER BY`` is added: page boundaries rely on the engine's implicit
    order.
    """
    return f"{_select(schema, table, columns)} LIMIT {offset},{size}"


def build_since_query(
    schema: str, table: str, columns: Sequence[str], date_column: str,
) -> str:
    """Return the SQL for rows whose *date_column* is newer than a ``?`` parameter."""
    return f"{_select(schema, table, columns)} WHERE {armor(date_column)} > ?"
