"""Tests for mysqlsync.connection -- load_dotenv, MySQLConnection, factories."""

from __future__ import annotations

import os
from unittest.mock import MagicMock, patch

import pytest

from mysqlsync.connection import (
    MySQLConnection,
    connection_factory,
    get_connection,
    load_dotenv,
)


class TestLoadDotenv:
    def test_loads_vars_into_environ(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("FOO=bar\nBAZ=qux\n")
        with patch.dict(os.environ, {}, clear=True):
            load_dotenv(str(env_file))
            assert os.environ["FOO"] == "bar"
            assert os.environ["BAZ"] == "qux"

    def test_does_not_overwrite_existing(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("FOO=new\n")
        with patch.dict(os.environ, {"FOO": "old"}, clear=True):
            load_dotenv(str(env_file))
            assert os.environ["FOO"] == "old"

    def test_skips_comments_and_strips_quotes(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("# comment\n\nA='quoted'\nB=\"double\"\n")
        with patch.dict(os.environ, {}, clear=True):
            load_dotenv(str(env_file))
            assert os.environ["A"] == "quoted"
            assert os.environ["B"] == "double"

    def test_noop_when_file_missing(self, tmp_path):
        load_dotenv(str(tmp_path / "no-such-file"))


def _empty_env(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return str(env_file)


class TestMySQLConnection:
    def test_explicit_params(self, tmp_path):
        conn = MySQLConnection(
            host="db1", port="3307", user="sync", password="pw", database="shop",
            dotenv_path=_empty_env(tmp_path),
        )
        assert conn.host == "db1"
        assert conn.port == 3307
        assert conn.user == "sync"

    def test_falls_back_to_env(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MYSQL_HOST=envhost\nMYSQL_USER=envuser\nMYSQL_PASSWORD=envpw\n")
        with patch.dict(os.environ, {}, clear=True):
            conn = MySQLConnection(dotenv_path=str(env_file))
            assert conn.host == "envhost"
            assert conn.user == "envuser"
            assert conn.port == 3306
            assert "Pwd=envpw;" in conn.connection_string

    def test_connection_string(self, tmp_path):
        conn = MySQLConnection(
            host="db1", user="u", password="p", database="shop", driver="MySQL X",
            dotenv_path=_empty_env(tmp_path),
        )
        s = conn.connection_string
        assert s.startswith("Driver={MySQL X};Server=db1;Port=3306;Database=shop;")
        assert "NO_CACHE=1;" in s
        assert "FORWARD_CURSOR=1;" in s

    def test_connection_string_without_database(self, tmp_path):
        conn = MySQLConnection(host="db1", password="p", dotenv_path=_empty_env(tmp_path))
        assert "Database=" not in conn.connection_string

    def test_connect_raises_without_password(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            conn = MySQLConnection(dotenv_path=_empty_env(tmp_path))
            with pytest.raises(ValueError, match="No password supplied"):
                conn.connect()

    @patch("mysqlsync.connection.pyodbc")
    def test_connect_is_cached_until_closed(self, mock_pyodbc, tmp_path):
        mock_pyodbc.connect.side_effect = lambda s: MagicMock()
        conn = MySQLConnection(password="p", dotenv_path=_empty_env(tmp_path))
        first = conn.connect()
        assert conn.connect() is first
        conn.close()
        first.close.assert_called_once()
        assert conn.connect() is not first

    @patch("mysqlsync.connection.pyodbc")
    def test_context_manager(self, mock_pyodbc, tmp_path):
        raw = MagicMock()
        mock_pyodbc.connect.return_value = raw
        with MySQLConnection(password="p", dotenv_path=_empty_env(tmp_path)) as c:
            assert c is raw
        raw.close.assert_called_once()


class TestFactories:
    @patch("mysqlsync.connection.pyodbc")
    def test_get_connection(self, mock_pyodbc, tmp_path):
        mock_pyodbc.connect.return_value = "conn"
        assert get_connection(password="p", dotenv_path=_empty_env(tmp_path)) == "conn"

    @patch("mysqlsync.connection.pyodbc")
    def test_factory_opens_new_connection_each_call(self, mock_pyodbc):
        mock_pyodbc.connect.side_effect = lambda s: MagicMock()
        factory = connection_factory(host="db1", password="p")
        assert factory() is not factory()
        assert mock_pyodbc.connect.call_count == 2
        assert "Server=db1;" in mock_pyodbc.connect.call_args.args[0]

    def test_factory_fails_early_without_password(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="No password supplied"):
                connection_factory(host="db1")
