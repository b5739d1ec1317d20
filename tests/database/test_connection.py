"""Tests for opening and using database handles."""

import sqlite3
from unittest.mock import MagicMock, patch

import pytest

from pts_cli.database import create_introspector
from pts_cli.database.connection import DatabaseHandle, open_database
from pts_cli.errors import DatabaseConnectionError, UnsupportedDriverError
from pts_cli.project_config import DatabaseSettings


class TestDatabaseHandle:
    """Test DatabaseHandle over an in-memory SQLite connection."""

    @pytest.fixture
    def handle(self):
        handle = DatabaseHandle(sqlite3.connect(":memory:"), "sqlite")
        handle.execute("CREATE TABLE t (Id INTEGER, Name TEXT)")
        handle.execute("INSERT INTO t VALUES (1, 'a')")
        yield handle
        handle.close()

    def test_rows_are_keyed_by_lower_case_names(self, handle):
        assert handle.query("SELECT Id, Name FROM t") == [{"id": 1, "name": "a"}]

    def test_query_with_params(self, handle):
        assert handle.query("SELECT name FROM t WHERE id = ?", [2]) == []

    def test_statement_without_rows(self, handle):
        assert handle.query("UPDATE t SET name = 'b'") == []

    def test_close_is_idempotent(self, handle):
        handle.close()
        handle.close()

    def test_context_manager_closes(self):
        with DatabaseHandle(sqlite3.connect(":memory:"), "sqlite") as handle:
            handle.ping()
        assert handle._connection is None


class TestOpenDatabase:
    """Test open_database()."""

    def test_unknown_driver(self):
        with pytest.raises(UnsupportedDriverError, match="oracle"):
            open_database(DatabaseSettings(driver="oracle"))

    def test_missing_sqlite_file(self, tmp_path):
        path = tmp_path / "missing.db"
        with pytest.raises(DatabaseConnectionError):
            open_database(DatabaseSettings(driver="sqlite", data_source_name=str(path)))
        assert not path.exists()

    def test_sqlite(self, sqlite_db):
        with open_database(DatabaseSettings(driver="sqlite3", data_source_name=str(sqlite_db))) as handle:
            assert handle.dialect == "sqlite"
            assert handle.query("SELECT COUNT(*) AS n FROM users") == [{"n": 1}]

    def test_create_introspector_unknown_dialect(self):
        handle = DatabaseHandle(sqlite3.connect(":memory:"), "oracle")
        with pytest.raises(UnsupportedDriverError):
            create_introspector(handle)
        handle.close()

    def test_connect_failure_is_wrapped(self):
        connector = MagicMock(side_effect=RuntimeError("connection refused"))
        with patch.dict("pts_cli.database.connection._CONNECTORS", {"mysql": connector}):
            with pytest.raises(DatabaseConnectionError, match="connection refused"):
                open_database(DatabaseSettings(driver="mysql", database="shop"), connect_timeout=3)

        connector.assert_called_once()
        assert connector.call_args[0][1] == 3

    def test_missing_driver_propagates(self):
        connector = MagicMock(side_effect=ImportError("pymysql is required"))
        with patch.dict("pts_cli.database.connection._CONNECTORS", {"mysql": connector}):
            with pytest.raises(ImportError):
                open_database(DatabaseSettings(driver="mysql", database="shop"))

    def test_ping_failure_closes_connection(self):
        connection = MagicMock()
        connection.cursor.return_value.execute.side_effect = RuntimeError("server has gone away")
        with patch.dict("pts_cli.database.connection._CONNECTORS", {"postgresql": lambda db, timeout: connection}):
            with pytest.raises(DatabaseConnectionError, match="cannot ping"):
                open_database(DatabaseSettings(driver="postgres"))

        connection.close.assert_called_once()

    def test_sqlite_file_uri(self, sqlite_db):
        dsn = f"{sqlite_db.resolve().as_uri()}?mode=ro"
        with open_database(DatabaseSettings(driver="sqlite", data_source_name=dsn)) as handle:
            assert handle.query("SELECT name FROM users") == [{"name": "alice"}]

    def test_sqlite_file_uri_missing_file(self, tmp_path):
        dsn = f"{(tmp_path / 'missing.db').as_uri()}?mode=ro"
        with pytest.raises(DatabaseConnectionError):
            open_database(DatabaseSettings(driver="sqlite", data_source_name=dsn))
