"""SQL statement generation, batching and execution framing.

Every fragment of generated SQL goes through a :class:`StatementSink`, which
hands it verbatim to the script writer (if any) and accumulates it in an
execution buffer.  The buffer is executed on the target cursor exactly when
its last character is ``;``, so multi-line statements such as a batched
``INSERT`` are sent to the server as one statement::

    sink = StatementSink(cursor=target_cur, writer=script)
    write_header(sink)
    stmts = TableStatements(sink, "customer", ["id", "name"], ["id"], anonymizer)
    reader.paginate(source_cur, "shop", "customer", ["id", "name"], 500_000,
                    stmts.full_load_row)
    write_footer(sink)
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence

from ._constants import INSERT_BATCH_ROWS
from .anonymizer import Anonymizer
from .codec import armor, sql_value
from .errors import StatementExecutionFailure
from .reader import ResultPosition

logger = logging.getLogger(__name__)

RULE = "-- " + "-" * 65

HEADER = (
    "/*!40101 SET @OLD_CHARACTER_SET_CLIENT=@@CHARACTER_SET_CLIENT */;",
    "/*!40101 SET @OLD_CHARACTER_SET_RESULTS=@@CHARACTER_SET_RESULTS */;",
    "/*!40101 SET @OLD_COLLATION_CONNECTION=@@COLLATION_CONNECTION */;",
    "/*!40101 SET NAMES utf8 */;",
    "SET NAMES utf8mb4;",
    "/*!40014 SET @OLD_FOREIGN_KEY_CHECKS=@@FOREIGN_KEY_CHECKS, FOREIGN_KEY_CHECKS=0 */;",
    "/*!40101 SET @OLD_SQL_MODE=@@SQL_MODE, SQL_MODE='NO_AUTO_VALUE_ON_ZERO' */;",
    "/*!40111 SET @OLD_SQL_NOTES=@@SQL_NOTES, SQL_NOTES=0 */;",
)

FOOTER = (
    "/*!40111 SET SQL_NOTES=@OLD_SQL_NOTES */;",
    "/*!40101 SET SQL_MODE=@OLD_SQL_MODE */;",
    "/*!40014 SET FOREIGN_KEY_CHECKS=@OLD_FOREIGN_KEY_CHECKS */;",
    "/*!40101 SET CHARACTER_SET_CLIENT=@OLD_CHARACTER_SET_CLIENT */;",
    "/*!40101 SET CHARACTER_SET_RESULTS=@OLD_CHARACTER_SET_RESULTS */;",
    "/*!40101 SET COLLATION_CONNECTION=@OLD_COLLATION_CONNECTION */;",
)


class StatementSink:
    """Route SQL text to a live cursor, a script writer, both or neither.

    Args:
        cursor: Target cursor statements are executed on; ``None`` for
                dry runs.
        writer: Object with a ``write(str)`` method receiving the script
                text; ``None`` when no script is produced.
    """

    def __init__(self, cursor: Optional[Any] = None, writer: Optional[Any] = None) -> None:
        self.cursor = cursor
        self.writer = writer
        self.executed = 0
        self._buffer: List[str] = []

    @property
    def pending(self) -> str:
        """Buffered text not yet terminated by ``;``."""
        return "".join(self._buffer)

    def _append(self, text: str) -> None:
        if self.cursor is None:
            return
        stripped = text.strip()
        self._buffer.append(stripped)
        if self.pending.endswith(";"):
            statement = self.pending
            self._buffer.clear()
            logger.debug("Executing %s", statement)
            try:
                self.cursor.execute(statement)
            except Exception as exc:
                raise StatementExecutionFailure(
                    f"Error while executing statement {statement[:200]}: {exc}"
                ) from exc
            self.executed += 1
        else:
            self._buffer.append(" ")

    def reset(self) -> None:
        """Drop buffered text of a statement that will never be completed."""
        self._buffer.clear()

    def write(self, text: str) -> None:
        self._append(text)
        if self.writer is not None:
            self.writer.write(text)

    def write_line(self, text: str) -> None:
        self._append(text)
        if self.writer is not None:
            self.writer.write(text + "\n")

    def script_line(self, text: str) -> None:
        """Write *text* as a line of the script only."""
        if self.writer is not None:
            self.writer.write(text + "\n")

    def comment(self, text: str) -> None:
        """Write ``-- text`` to the script only."""
        self.script_line(f"-- {text}")


def write_header(sink: StatementSink) -> None:
    """Save and set the session variables a bulk load needs."""
    sink.script_line(RULE)
    for line in HEADER:
        sink.write_line(line)
    sink.script_line(RULE)


def write_footer(sink: StatementSink) -> None:
    """Restore the session variables saved by :func:`write_header` (script only)."""
    for line in (RULE, *FOOTER, RULE):
        sink.script_line(line)


class TableStatements:
    """Generate the statements that load one table.

    The ``*_row`` methods have the :data:`~mysqlsync.reader.RowCallback`
    signature and can be passed straight to the reader.
    """

    def __init__(
        self,
        sink: StatementSink,
        table: str,
        columns: Sequence[str],
        primary_keys: Sequence[str],
        anonymizer: Optional[Anonymizer] = None,
    ) -> None:
        self.sink = sink
        self.table = table
        self.columns = list(columns)
        self.primary_keys = list(primary_keys)
        self.anonymizer = anonymizer
        self.rows_inserted = 0
        self.rows_updated = 0
        self.insert_statements = 0
        self.truncated = False
        self.locked = False
        self._row_open = False
        self._batch_full = False

    def _value(self, column: str, row: Mapping[str, Any]) -> str:
        value = row.get(column)
        if self.anonymizer:
            value = self.anonymizer.anonymize(self.table, column, value, row)
        return sql_value(value)

    def _insert_into(self) -> None:
        cols = ",".join(armor(c) for c in self.columns)
        self.sink.write_line(f"INSERT {armor(self.table)} ({cols}) VALUES ")
        self.insert_statements += 1

    def truncate(self) -> None:
        self.sink.write_line(f"TRUNCATE {armor(self.table)};")
        self.truncated = True

    def drop_and_recreate(self, create_sql: str) -> None:
        self.sink.write_line(f"DROP TABLE IF EXISTS {armor(self.table)};")
        self.sink.write_line(create_sql.rstrip().rstrip(";") + ";")

    def full_load_row(self, row: Mapping[str, Any], pos: ResultPosition) -> None:
        if pos.is_first_row and pos.is_first_page:
            self.truncate()
        self.insert_row(row, pos)

    def insert_row(self, row: Mapping[str, Any], pos: ResultPosition) -> None:
        table = armor(self.table)
        values = ",".join(self._value(c, row) for c in self.columns)
        if pos.is_first_row:
            self.sink.write_line(f"LOCK TABLES {table} WRITE;")
            self.sink.write_line(f"/*!40000 ALTER TABLE {table} DISABLE KEYS */;")
            self.locked = True
            self._insert_into()
        elif self._batch_full:
            self.sink.write_line(";")
            self._insert_into()
        else:
            self.sink.write_line(",")
        # A row's separator is written when the next row arrives.
        self.sink.write(f"  ({values})")
        self.rows_inserted += 1
        self._row_open = True
        self._batch_full = pos.row % INSERT_BATCH_ROWS == 0
        if pos.is_last_row:
            self.sink.write_line(";")
            self._row_open = False
            self._unlock()

    def _unlock(self) -> None:
        table = armor(self.table)
        self.sink.write_line(f"/*!40000 ALTER TABLE {table} ENABLE KEYS */;")
        self.sink.write_line("UNLOCK TABLES;")
        self.locked = False

    def abort(self) -> None:
        """Leave the sink clean after a failure in the middle of the table.

        Unexecuted text is dropped.  An INSERT already written to the script
        is terminated there, and a table lock taken by :meth:`insert_row` is
        released on the target and in the script.
        """
        self.sink.reset()
        if self._row_open:
            self.sink.script_line(";")
            self._row_open = False
        if self.locked:
            self._unlock()

    def update_row(self, row: Mapping[str, Any], pos: ResultPosition) -> None:
        assignments = ",".join(
            f"{armor(c)}={self._value(c, row)}"
            for c in self.columns if c not in self.primary_keys
        )
        condition = " AND ".join(
            f"{armor(k)}={self._value(k, row)}" for k in self.primary_keys
        )
        self.sink.write_line(
            f"UPDATE {armor(self.table)} SET {assignments} WHERE {condition};"
        )
        self.rows_updated += 1
