"""Incremental-load prerequisites and the target watermark.

An incremental load needs a primary key, a creation-date column, a
last-modified-date column and a target table from which the newest of those
dates can be read.  Every missing piece raises
:class:`~mysqlsync.errors.WatermarkUndeterminable`, which the caller turns
into a full load.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Tuple

from . import queries
from ._constants import CREATION_DATE_COLUMNS, LAST_MODIFIED_DATE_COLUMNS
from .errors import WatermarkUndeterminable

logger = logging.getLogger(__name__)


def _first_present(candidates: Sequence[str], columns: Sequence[str]) -> Optional[str]:
    return next((c for c in candidates if c in columns), None)


def date_columns(columns: Sequence[str]) -> Optional[Tuple[str, str]]:
    """Return ``(creation_column, last_modified_column)`` or ``None``."""
    creation = _first_present(CREATION_DATE_COLUMNS, columns)
    modified = _first_present(LAST_MODIFIED_DATE_COLUMNS, columns)
    if creation is None or modified is None:
        return None
    return creation, modified


def require_prerequisites(
    table: str, primary_keys: Sequence[str], columns: Sequence[str],
) -> Tuple[str, str]:
    """Return the date columns of *table* or raise if incremental load is impossible."""
    if not primary_keys:
        raise WatermarkUndeterminable(f"Table {table} has no primary key column")
    found = date_columns(columns)
    if found is None:
        raise WatermarkUndeterminable(
            f"Could not determine creation date or last modified date column for table {table}"
        )
    return found


def determine(
    cursor: Any, schema: str, table: str, creation_column: str, modified_column: str,
) -> str:
    """Return the newest creation / last-modified date of the target table."""
    value = queries.max_date(cursor, schema, table, creation_column, modified_column)
    if value is None:
        raise WatermarkUndeterminable(
            f"Could not determine maximum creation date and last modified date for table {table}"
        )
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    logger.debug("Watermark for %s.%s: %s", schema, table, value)
    return str(value)
