"""Per-table load strategy: full reload or incremental catch-up.

Full
    Optionally drop and recreate the target table, then stream the source
    table page by page; the first row of the first page truncates the
    target.  An empty source table still truncates the target.

Incremental
    Read the newest creation / last-modified date already in the target
    (the *watermark*), insert source rows created after it and update
    source rows modified after it.  When the table has no primary key, no
    date columns or no readable watermark the table is fully reloaded.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Sequence

from . import queries, reader, watermark
from ._constants import DEFAULT_MAX_ROWS_PER_PAGE
from .errors import WatermarkUndeterminable
from .statements import TableStatements

logger = logging.getLogger(__name__)


def _full_load(
    source_cursor: Any,
    table: str,
    *,
    source_schema: str,
    columns: Sequence[str],
    statements: TableStatements,
    target_schema: Optional[str],
    drop_and_recreate: bool,
    create_table_cursor: Any,
    page_size: int,
) -> int:
    if drop_and_recreate:
        schema = target_schema if target_schema is not None else source_schema
        create_sql = queries.show_create_table(create_table_cursor, schema, table)
        logger.info("Dropping and recreating %s", table)
        statements.drop_and_recreate(create_sql)
    rows = reader.paginate(
        source_cursor, source_schema, table, columns, page_size,
        statements.full_load_row,
    )
    if rows == 0 and not statements.truncated:
        statements.truncate()
    return rows


def _incremental_load(
    source_cursor: Any,
    table: str,
    *,
    source_schema: str,
    columns: Sequence[str],
    primary_keys: Sequence[str],
    statements: TableStatements,
    target_cursor: Optional[Any],
    target_schema: Optional[str],
) -> int:
    creation, modified = watermark.require_prerequisites(table, primary_keys, columns)
    if target_cursor is None or target_schema is None:
        raise WatermarkUndeterminable(f"No target table to read a watermark for {table}")
    since = watermark.determine(target_cursor, target_schema, table, creation, modified)
    logger.info("Loading rows of %s created or modified after %s", table, since)

    inserted = reader.stream(
        source_cursor,
        queries.build_since_query(source_schema, table, columns, creation),
        statements.insert_row,
        params=(since,),
    )
    updated = reader.stream(
        source_cursor,
        queries.build_since_query(source_schema, table, columns, modified),
        statements.update_row,
        params=(since,),
    )
    return inserted + updated


def sync_table(
    source_cursor: Any,
    table: str,
    *,
    source_schema: str,
    columns: Sequence[str],
    primary_keys: Sequence[str],
    statements: TableStatements,
    target_cursor: Optional[Any] = None,
    target_schema: Optional[str] = None,
    incremental: bool = False,
    drop_and_recreate: bool = False,
    create_table_cursor: Optional[Any] = None,
    page_size: int = DEFAULT_MAX_ROWS_PER_PAGE,
) -> dict:
    """Load one table into the sink behind *statements*.

    Args:
        source_cursor:       Cursor used to stream source rows.  It must not
                             be shared with another table being streamed.
        table:               Table name, identical in source and target.
        source_schema:       Schema the rows are read from.
        columns:             Column set, primary keys first.
        primary_keys:        Primary-key columns (may be empty).
        statements:          Statement generator bound to the table's sink.
        target_cursor:       Cursor able to read the target table, used for
                             the incremental watermark.
        target_schema:       Target schema, or ``None`` when there is none.
        incremental:         Try an incremental load first.
        drop_and_recreate:   Drop and recreate the table before a full load.
        create_table_cursor: Cursor for ``SHOW CREATE TABLE``; defaults to
                             *target_cursor* when there is a target schema,
                             else *source_cursor*.
        page_size:           Maximum rows per page of a full load.

    Returns:
        Summary dict.
    """
    t0 = time.monotonic()
    if create_table_cursor is None:
        create_table_cursor = target_cursor if target_schema is not None else source_cursor

    mode = "incremental" if incremental else "full"
    rows_read = 0
    if incremental:
        try:
            rows_read = _incremental_load(
                source_cursor, table,
                source_schema=source_schema,
                columns=columns,
                primary_keys=primary_keys,
                statements=statements,
                target_cursor=target_cursor,
                target_schema=target_schema,
            )
        except WatermarkUndeterminable as exc:
            logger.info("%s, falling back to full sync", exc)
            mode = "full"

    if mode == "full":
        rows_read = _full_load(
            source_cursor, table,
            source_schema=source_schema,
            columns=columns,
            statements=statements,
            target_schema=target_schema,
            drop_and_recreate=drop_and_recreate and not incremental,
            create_table_cursor=create_table_cursor,
            page_size=page_size,
        )

    elapsed = time.monotonic() - t0
    logger.info(
        "%s: %d rows read, %d inserted, %d updated (%s, %.1fs)",
        table, rows_read, statements.rows_inserted, statements.rows_updated,
        mode, elapsed,
    )
    return {
        "table": table,
        "mode": mode,
        "rows_read": rows_read,
        "rows_inserted": statements.rows_inserted,
        "rows_updated": statements.rows_updated,
        "insert_statements": statements.insert_statements,
        "duration_seconds": round(elapsed, 2),
    }
