"""Rendering of Python values and identifiers as MySQL literals.

:func:`literal` never fails: values of unknown types fall back to their
quoted string form.  :func:`armor` only quotes identifiers that contain a
hyphen or a dot, which keeps generated scripts identical to the ones
produced by earlier releases.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Optional, Set

logger = logging.getLogger(__name__)

_warned_types: Set[type] = set()


def _quote(text: str) -> str:
    return "'" + text.replace("'", "''").replace("\\", "\\\\") + "'"


def literal(value: Any) -> Optional[str]:
    """Return *value* as a SQL literal, or ``None`` for SQL ``NULL``."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (str, datetime, date, time, timedelta)):
        return _quote(str(value))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "X'" + bytes(value).hex().upper() + "'"
    if type(value) not in _warned_types:
        _warned_types.add(type(value))
        logger.warning("No explicit mapping for value type %s", type(value).__name__)
    return _quote(str(value))


def sql_value(value: Any) -> str:
    """Like :func:`literal` but renders ``None`` as ``NULL``."""
    rendered = literal(value)
    return "NULL" if rendered is None else rendered


def armor(identifier: str) -> str:
    """Backtick-quote *identifier* if it contains ``-`` or ``.``."""
    if (
        not identifier.startswith("`")
        and not identifier.endswith("`")
        and ("-" in identifier or "." in identifier)
    ):
        return f"`{identifier}`"
    return identifier


def qualified(schema: str, table: str) -> str:
    """Return ``schema.table`` with both parts armored."""
    return f"{armor(schema)}.{armor(table)}"
