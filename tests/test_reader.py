"""Tests for mysqlsync.reader -- streaming rows with position metadata."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakeServer, Table
from mysqlsync import reader
from mysqlsync.errors import RowStreamFailure, SchemaMismatch


def _collect():
    seen = []

    def on_row(row, pos):
        seen.append((dict(row), pos))

    return seen, on_row


class TestNormalizeTimestamp:
    def test_aware_converted_to_naive_utc(self):
        cet = timezone(timedelta(hours=1))
        value = datetime(2024, 1, 1, 12, 0, tzinfo=cet)
        assert reader.normalize_timestamp(value) == datetime(2024, 1, 1, 11, 0)

    def test_naive_and_other_values_unchanged(self):
        naive = datetime(2024, 1, 1, 12, 0)
        assert reader.normalize_timestamp(naive) is naive
        assert reader.normalize_timestamp("x") == "x"


class TestStream:
    def test_positions(self, fake_cursor):
        cur = fake_cursor(
            results=[[(1, "a"), (2, "b"), (3, "c")]],
            descriptions=[[("id",), ("name",)]],
        )
        seen, on_row = _collect()
        assert reader.stream(cur, "SELECT id, name FROM t", on_row, fetch_size=2) == 3

        assert [r for r, _ in seen] == [
            {"id": 1, "name": "a"}, {"id": 2, "name": "b"}, {"id": 3, "name": "c"},
        ]
        assert [(p.is_first_row, p.is_last_row, p.row) for _, p in seen] == [
            (True, False, 1), (False, False, 2), (False, True, 3),
        ]
        assert all(p.is_first_page for _, p in seen)

    def test_single_row_is_first_and_last(self, fake_cursor):
        cur = fake_cursor(results=[[(1,)]], descriptions=[[("id",)]])
        seen, on_row = _collect()
        reader.stream(cur, "q", on_row, is_first_page=False)
        pos = seen[0][1]
        assert pos.is_first_row and pos.is_last_row
        assert not pos.is_first_page

    def test_empty_result(self, fake_cursor):
        cur = fake_cursor(results=[[]], descriptions=[[("id",)]])
        seen, on_row = _collect()
        assert reader.stream(cur, "q", on_row) == 0
        assert seen == []

    def test_uses_fetchmany_only(self, fake_cursor):
        cur = fake_cursor(results=[[(i,) for i in range(5)]], descriptions=[[("id",)]])
        cur.fetchmany_only = True
        reader.stream(cur, "q", lambda row, pos: None, fetch_size=2)
        assert cur.fetchmany_sizes == [2, 2, 2, 2]

    def test_params_passed(self, fake_cursor):
        cur = fake_cursor(results=[[]])
        reader.stream(cur, "SELECT a FROM t WHERE d > ?", lambda r, p: None, params=("2024",))
        assert cur.executed == [("SELECT a FROM t WHERE d > ?", ("2024",))]

    def test_query_failure_wrapped(self, mock_conn):
        cur = mock_conn.cursor()
        cur.execute.side_effect = RuntimeError("syntax")
        with pytest.raises(RowStreamFailure, match="syntax"):
            reader.stream(cur, "q", lambda r, p: None)

    def test_callback_failure_wrapped(self, fake_cursor):
        cur = fake_cursor(results=[[(1,)]], descriptions=[[("id",)]])

        def boom(row, pos):
            raise ValueError("bad row")

        with pytest.raises(RowStreamFailure, match="bad row") as exc_info:
            reader.stream(cur, "q", boom)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_sync_errors_propagate_unchanged(self, fake_cursor):
        cur = fake_cursor(results=[[(1,)]], descriptions=[[("id",)]])

        def boom(row, pos):
            raise SchemaMismatch("x")

        with pytest.raises(SchemaMismatch):
            reader.stream(cur, "q", boom)


class TestPaginate:
    def _server(self, n):
        return FakeServer({"shop": {"t": Table(["id"], ["id"], [{"id": i} for i in range(n)])}})

    def test_pages_until_empty(self):
        server = self._server(5)
        cur = server.connect().cursor()
        seen, on_row = _collect()
        assert reader.paginate(cur, "shop", "t", ["id"], 2, on_row) == 5
        assert server.queries == [
            "SELECT id FROM shop.t LIMIT 0,2",
            "SELECT id FROM shop.t LIMIT 2,2",
            "SELECT id FROM shop.t LIMIT 4,2",
            "SELECT id FROM shop.t LIMIT 6,2",
        ]
        assert [r["id"] for r, _ in seen] == [0, 1, 2, 3, 4]

    def test_first_page_flag_and_per_page_positions(self):
        server = self._server(3)
        seen, on_row = _collect()
        reader.paginate(server.connect().cursor(), "shop", "t", ["id"], 2, on_row)
        assert [(p.is_first_page, p.is_first_row, p.is_last_row, p.row) for _, p in seen] == [
            (True, True, False, 1),
            (True, False, True, 2),
            (False, True, True, 1),
        ]

    def test_empty_table(self):
        server = self._server(0)
        seen, on_row = _collect()
        assert reader.paginate(server.connect().cursor(), "shop", "t", ["id"], 10, on_row) == 0
        assert len(server.queries) == 1
