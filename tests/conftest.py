"""Shared fixtures for mysqlsync tests."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from unittest.mock import MagicMock

import pytest


class FakeCursor:
    """Lightweight stand-in for a DB-API 2.0 cursor.

    Supply ``results`` as a list of lists -- each inner list is a set of rows
    returned by one successive ``execute()`` call.
    """

    fetchmany_only = False

    def __init__(
        self,
        results: Optional[List[List[Tuple[Any, ...]]]] = None,
        descriptions: Optional[List[List[Tuple[str, ...]]]] = None,
    ) -> None:
        self._results = list(results or [])
        self._descriptions = list(descriptions or [])
        self._call_idx = -1
        self._rows: List[Tuple[Any, ...]] = []
        self.description: Optional[List[Tuple[str, ...]]] = None
        self.executed: List[Tuple[str, Any]] = []
        self.fetchmany_sizes: List[int] = []

    def execute(self, sql: str, params: Any = None) -> None:
        self.executed.append((sql, params))
        self._call_idx += 1
        if self._call_idx < len(self._results):
            self._rows = list(self._results[self._call_idx])
        else:
            self._rows = []
        if self._call_idx < len(self._descriptions):
            self.description = self._descriptions[self._call_idx]
        else:
            self.description = None

    def fetchall(self) -> List[Tuple[Any, ...]]:
        if self.fetchmany_only:
            raise AssertionError("row streams must use fetchmany")
        rows, self._rows = self._rows, []
        return rows

    def fetchmany(self, size: int = 1) -> List[Tuple[Any, ...]]:
        self.fetchmany_sizes.append(size)
        rows = self._rows[:size]
        self._rows = self._rows[size:]
        return rows

    def fetchone(self) -> Optional[Tuple[Any, ...]]:
        return self._rows[0] if self._rows else None

    def close(self) -> None:
        pass


# -- in-memory MySQL server -------------------------------------------------


def _unquote(identifier: str) -> str:
    return identifier.strip().strip("`")


def _split_qualified(name: str) -> Tuple[str, str]:
    schema, table = name.split(".", 1)
    return _unquote(schema), _unquote(table)


class Table:
    """One table of a :class:`FakeServer` schema.

    ``rows`` are dicts keyed by column name.
    """

    def __init__(
        self,
        columns: Sequence[str],
        primary_key: Sequence[str] = (),
        rows: Sequence[Dict[str, Any]] = (),
        create: Optional[str] = None,
    ) -> None:
        self.columns = list(columns)
        self.primary_key = list(primary_key)
        self.rows = [dict(r) for r in rows]
        self.create = create or f"CREATE TABLE t ({', '.join(self.columns)})"


class FakeServer:
    """Answers the catalog and data queries mysqlsync issues, from memory.

    Every statement that is not a recognised query is recorded in
    :attr:`statements`, in execution order.
    """

    _LIST_TABLES = re.compile(r"FROM INFORMATION_SCHEMA\.TABLES t WHERE", re.I)
    _KEY_COLUMNS = re.compile(r"LEFT JOIN INFORMATION_SCHEMA\.COLUMNS", re.I)
    _SHOW_CREATE = re.compile(r"^SHOW CREATE TABLE (\S+)$", re.I)
    _MAX_DATE = re.compile(
        r"MAX\((\S+?)\).*MAX\((\S+?)\).* FROM (\S+)$", re.I | re.S,
    )
    _PAGE = re.compile(r"^SELECT (.+) FROM (\S+) LIMIT (\d+),(\d+)$", re.S)
    _SINCE = re.compile(r"^SELECT (.+) FROM (\S+) WHERE (\S+) > \?$", re.S)

    def __init__(self, schemas: Dict[str, Dict[str, Table]]) -> None:
        self.schemas = schemas
        self.statements: List[str] = []
        self.queries: List[str] = []
        self.connections: List["FakeConnection"] = []
        self.fail_on: Optional[str] = None

    def connect(self) -> "FakeConnection":
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    @property
    def factory(self) -> Callable[[], "FakeConnection"]:
        return self.connect

    def table(self, qualified: str) -> Table:
        schema, name = _split_qualified(qualified)
        return self.schemas[schema][name]

    def answer(self, sql: str, params: Any) -> Tuple[List[Tuple[Any, ...]], Any]:
        if self.fail_on and re.search(self.fail_on, sql):
            raise RuntimeError(f"simulated failure for {sql}")
        params = list(params or ())
        if self._KEY_COLUMNS.search(sql):
            self.queries.append(sql)
            schema, tables = params[0], params[1:]
            primary = "COLUMN_KEY = 'PRI'" in sql
            rows: List[Tuple[Any, ...]] = []
            for name in sorted(tables):
                table = self.schemas.get(schema, {}).get(name)
                if table is None:
                    continue
                cols = [
                    c for c in table.columns
                    if (c in table.primary_key) == primary
                ]
                if cols:
                    rows.extend((name, c) for c in cols)
                else:
                    rows.append((name, None))
            return rows, None
        if self._LIST_TABLES.search(sql):
            self.queries.append(sql)
            schema, excluded = params[0], set(params[1:])
            names = sorted(t for t in self.schemas.get(schema, {}) if t not in excluded)
            return [(n,) for n in names], None
        m = self._SHOW_CREATE.match(sql)
        if m:
            self.queries.append(sql)
            table = self.table(m.group(1))
            return [(_split_qualified(m.group(1))[1], table.create)], None
        m = self._MAX_DATE.search(sql)
        if m and sql.startswith("SELECT CAST(GREATEST("):
            self.queries.append(sql)
            modified, creation = _unquote(m.group(1)), _unquote(m.group(2))
            table = self.table(m.group(3))
            values = [
                str(r[c]) for r in table.rows for c in (modified, creation)
                if r.get(c) is not None
            ]
            return [(max(values, default="0000-01-01 00:00:00"),)], None
        m = self._PAGE.match(sql)
        if m:
            self.queries.append(sql)
            columns = [_unquote(c) for c in m.group(1).split(",")]
            table = self.table(m.group(2))
            offset, size = int(m.group(3)), int(m.group(4))
            page = table.rows[offset:offset + size]
            return [tuple(r.get(c) for c in columns) for r in page], [(c,) for c in columns]
        m = self._SINCE.match(sql)
        if m:
            self.queries.append(sql)
            columns = [_unquote(c) for c in m.group(1).split(",")]
            table = self.table(m.group(2))
            column, since = _unquote(m.group(3)), str(params[0])
            selected = [r for r in table.rows if r.get(column) is not None and str(r[column]) > since]
            return [tuple(r.get(c) for c in columns) for r in selected], [(c,) for c in columns]
        self.statements.append(sql)
        return [], None


class FakeConnection:
    def __init__(self, server: FakeServer) -> None:
        self.server = server
        self.autocommit = True
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self) -> "ServerCursor":
        return ServerCursor(self.server)

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        self.closed = True


class ServerCursor(FakeCursor):
    """A :class:`FakeCursor` whose results come from a :class:`FakeServer`."""

    def __init__(self, server: FakeServer) -> None:
        super().__init__()
        self.server = server

    def execute(self, sql: str, params: Any = None) -> None:
        self.executed.append((sql, params))
        self._rows, self.description = self.server.answer(sql, params)


@pytest.fixture()
def fake_cursor():
    """Return the ``FakeCursor`` *class* so tests can instantiate with custom data."""
    return FakeCursor


@pytest.fixture()
def mock_conn():
    """Return a ``MagicMock`` that looks like a DB-API 2.0 connection."""
    conn = MagicMock()
    return conn
