"""Shared pytest fixtures for pts-cli tests."""

import re
import sqlite3
import threading

import pytest
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from pts_cli.database.models import Column, Table
from pts_cli.project_config import ProjectConfig


Rows = List[Dict[str, Any]]
Response = Union[Rows, Callable[[str, Sequence[Any]], Rows], Exception]


class FakeHandle:
    """Stands in for DatabaseHandle without a server.

    Responses are matched against the SQL text by regex, first match wins.
    A response is a row list, a callable ``(sql, params) -> rows`` or an
    exception to raise.
    """

    def __init__(self, dialect: str):
        self.dialect = dialect
        self.queries: List[tuple] = []
        self.executed: List[str] = []
        self._responses: List[tuple] = []
        self.closed = False
        self._lock = threading.Lock()

    def add_response(self, sql_pattern: str, response: Response) -> None:
        self._responses.append((re.compile(sql_pattern, re.DOTALL), response))

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> Rows:
        params = tuple(params or ())
        with self._lock:
            self.queries.append((sql, params))
        for pattern, response in self._responses:
            if pattern.search(sql):
                if isinstance(response, Exception):
                    raise response
                if callable(response):
                    return response(sql, params)
                return [dict(row) for row in response]
        return []

    def execute(self, sql: str) -> None:
        self.executed.append(sql)

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@pytest.fixture
def fake_handle_factory():
    """Create FakeHandle instances for a dialect."""
    return FakeHandle


@pytest.fixture
def sample_tables():
    """Two enriched-looking tables sharing an ``id`` column."""
    users = Table(
        name="users",
        database="shop",
        comment="registered users",
        columns=[
            Column(name="id", table="users", data_type="bigint", is_nullable="NO", ordinal_position=1),
            Column(name="user_name", table="users", data_type="varchar", is_nullable="YES", ordinal_position=2),
            Column(name="avatar", table="users", data_type="blob", is_nullable="YES", ordinal_position=3),
        ],
    )
    orders = Table(
        name="orders",
        database="shop",
        comment="",
        columns=[
            Column(name="id", table="orders", data_type="integer", is_nullable="NO", ordinal_position=1),
            Column(name="user_id", table="orders", data_type="bigint", is_nullable="NO", ordinal_position=2),
            Column(name="total", table="orders", data_type="numeric", is_nullable="YES", ordinal_position=3),
        ],
    )
    return [users, orders]


@pytest.fixture
def project_config_factory():
    """Build a ProjectConfig from keyword overrides."""
    def factory(driver: str = "mysql", **overrides) -> ProjectConfig:
        data = {
            "database": {
                "driver": driver,
                "database": "shop",
                "data_source_name": "",
            },
        }
        database = overrides.pop("database", None)
        if database:
            data["database"].update(database)
        data.update(overrides)
        return ProjectConfig.model_validate(data)

    return factory


@pytest.fixture
def sqlite_db(tmp_path):
    """A SQLite file with a few tables, returned as its path."""
    path = tmp_path / "shop.db"
    connection = sqlite3.connect(str(path))
    connection.executescript(
        """
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_name VARCHAR(64) NOT NULL,
            email TEXT,
            avatar BLOB,
            score REAL DEFAULT 0
        );
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            user_id BIGINT NOT NULL,
            paid BOOLEAN NOT NULL DEFAULT 0
        );
        CREATE TABLE log_2023 (id INTEGER, message TEXT);
        CREATE TABLE logbook (id INTEGER, entry TEXT);
        INSERT INTO users (user_name) VALUES ('alice');
        """
    )
    connection.commit()
    connection.close()
    return path
