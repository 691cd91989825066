"""Schema reconciliation between a source and an optional target schema.

Computes, once per run, which tables are synchronized, their primary-key
columns and their remaining columns.  Primary keys must agree between
source and target; a disagreement is a configuration error and aborts the
run before any data moves.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from . import queries
from .errors import SchemaMismatch

logger = logging.getLogger(__name__)

ExclusionRule = Union[str, "re.Pattern[str]"]


def compile_rules(rules: Iterable[ExclusionRule]) -> List["re.Pattern[str]"]:
    """Compile string patterns; already compiled patterns pass through."""
    return [r if isinstance(r, re.Pattern) else re.compile(r) for r in rules]


def column_set(primary_keys: Sequence[str], columns: Sequence[str]) -> List[str]:
    """Return primary keys followed by the other columns, without duplicates."""
    return list(dict.fromkeys([*primary_keys, *columns]))


class SchemaReconciler:
    """Compute the table / key / column universe of one sync run.

    Args:
        source_cursor:  Cursor on a connection that can read the source catalog.
        target_cursor:  Cursor for the target catalog, or ``None``.
        source_schema:  Schema to copy from.
        target_schema:  Schema to copy into; ``None`` means no target.
        exclusions:     Patterns matched against ``"table.column"``; matching
                        non-key columns are left out of the sync entirely.
    """

    def __init__(
        self,
        source_cursor: Any,
        target_cursor: Optional[Any],
        source_schema: str,
        target_schema: Optional[str],
        exclusions: Iterable[ExclusionRule] = (),
    ) -> None:
        self.source_cursor = source_cursor
        self.target_cursor = target_cursor if target_schema is not None else None
        self.source_schema = source_schema
        self.target_schema = target_schema
        self.exclusions = compile_rules(exclusions)

    @property
    def has_target(self) -> bool:
        return self.target_cursor is not None

    def sync_tables(self) -> List[str]:
        """Tables of the source schema that also exist in the target schema."""
        tables = set(queries.list_tables(self.source_cursor, self.source_schema))
        if self.has_target:
            tables &= set(queries.list_tables(self.target_cursor, self.target_schema))
        return sorted(tables)

    def primary_keys(self, tables: Sequence[str]) -> Dict[str, List[str]]:
        """Primary-key columns per table; raises :class:`SchemaMismatch` on disagreement."""
        source_keys = queries.key_columns(
            self.source_cursor, self.source_schema, tables, primary=True,
        )
        result = {t: source_keys.get(t, []) for t in tables}
        if self.has_target:
            target_keys = queries.key_columns(
                self.target_cursor, self.target_schema, tables, primary=True,
            )
            source_sets = {t: set(result[t]) for t in tables}
            target_sets = {t: set(target_keys.get(t, [])) for t in tables}
            if source_sets != target_sets:
                raise SchemaMismatch(
                    "sync tables have different primary keys "
                    f"source={source_sets}, target={target_sets}"
                )
        return result

    def sync_columns(self, tables: Sequence[str]) -> Dict[str, List[str]]:
        """Non-key columns per table present on both sides, exclusions removed."""
        source_cols = queries.key_columns(
            self.source_cursor, self.source_schema, tables, primary=False,
        )
        result = {t: source_cols.get(t, []) for t in tables}
        if self.has_target:
            target_cols = queries.key_columns(
                self.target_cursor, self.target_schema, tables, primary=False,
            )
            for t in tables:
                allowed = set(target_cols.get(t, []))
                result[t] = [c for c in result[t] if c in allowed]
        return {t: self._without_exclusions(t, cols) for t, cols in result.items()}

    def _without_exclusions(self, table: str, columns: List[str]) -> List[str]:
        kept = []
        for column in columns:
            field = f"{table}.{column}"
            if any(p.fullmatch(field) for p in self.exclusions):
                logger.debug("Excluding %s", field)
                continue
            kept.append(column)
        return kept
