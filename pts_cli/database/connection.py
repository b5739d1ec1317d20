"""Shared database handle used by every introspector."""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..errors import DatabaseConnectionError
from ..project_config import MYSQL, POSTGRESQL, SQLITE, DatabaseSettings, parse_mysql_dsn

logger = logging.getLogger(__name__)


class DatabaseHandle:
    """A single open DB-API connection shared by all introspection tasks.

    Statements are serialized with a lock; pymysql and sqlite3 connections
    must not run two statements at once.
    """

    def __init__(self, connection: Any, dialect: str):
        self._connection = connection
        self.dialect = dialect
        self._lock = threading.Lock()

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Run a statement and return its rows keyed by lower-cased column name."""
        with self._lock:
            cursor = self._connection.cursor()
            try:
                if params:
                    cursor.execute(sql, tuple(params))
                else:
                    cursor.execute(sql)
                if cursor.description is None:
                    return []
                names = [str(d[0]).lower() for d in cursor.description]
                return [dict(zip(names, row)) for row in cursor.fetchall()]
            finally:
                cursor.close()

    def execute(self, sql: str) -> None:
        """Run a statement (or a multi-statement script) with no result set."""
        with self._lock:
            cursor = self._connection.cursor()
            try:
                cursor.execute(sql)
            finally:
                cursor.close()

    def ping(self) -> None:
        self.query("SELECT 1")

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _connect_mysql(db: DatabaseSettings, connect_timeout: int):
    try:
        import pymysql
    except ImportError:
        raise ImportError(
            "pymysql is required for MySQL connections. "
            "Install it with: pip install pymysql"
        )

    params: Dict[str, Any] = {
        "host": db.host or "localhost",
        "port": db.port or 3306,
        "user": db.username,
        "password": db.password,
        "database": db.database,
    }
    if db.data_source_name.strip():
        params.update(parse_mysql_dsn(db.data_source_name))
    return pymysql.connect(
        charset="utf8mb4",
        autocommit=True,
        connect_timeout=connect_timeout,
        **params,
    )


def _connect_postgresql(db: DatabaseSettings, connect_timeout: int):
    try:
        import psycopg2
    except ImportError:
        raise ImportError(
            "psycopg2 is required for PostgreSQL connections. "
            "Install it with: pip install psycopg2-binary"
        )

    if db.data_source_name.strip():
        connection = psycopg2.connect(db.data_source_name.strip(), connect_timeout=connect_timeout)
    else:
        connection = psycopg2.connect(
            host=db.host or "localhost",
            port=db.port or 5432,
            user=db.username,
            password=db.password,
            dbname=db.database,
            sslmode="disable",
            connect_timeout=connect_timeout,
        )
    connection.autocommit = True
    return connection


def _connect_sqlite(db: DatabaseSettings, connect_timeout: int):
    import sqlite3

    dsn = db.data_source_name.strip()
    if dsn.startswith("file:"):
        # URI filenames carry their own mode and options
        return sqlite3.connect(dsn, uri=True, timeout=connect_timeout, check_same_thread=False)

    path = Path(dsn).expanduser()
    if not path.exists():
        raise DatabaseConnectionError(
            f"SQLite database file {path} does not exist", details={"path": str(path)}
        )
    # Read-only URI so a mistyped path never creates an empty database
    return sqlite3.connect(
        f"{path.resolve().as_uri()}?mode=ro",
        uri=True,
        timeout=connect_timeout,
        check_same_thread=False,
    )


_CONNECTORS = {
    MYSQL: _connect_mysql,
    POSTGRESQL: _connect_postgresql,
    SQLITE: _connect_sqlite,
}


def open_database(db: DatabaseSettings, connect_timeout: int = 10) -> DatabaseHandle:
    """Open and ping a connection for the configured driver.

    Raises:
        UnsupportedDriverError: if the driver is not mysql, postgres or sqlite
        DatabaseConnectionError: if the connection cannot be opened or pinged
    """
    dialect = db.dialect
    connector = _CONNECTORS[dialect]
    logger.info("Connecting to %s database", dialect)
    try:
        connection = connector(db, connect_timeout)
    except (DatabaseConnectionError, ImportError):
        raise
    except Exception as e:
        raise DatabaseConnectionError(
            f"cannot connect to {dialect} database: {e}", details={"driver": dialect}
        ) from e

    handle = DatabaseHandle(connection, dialect)
    try:
        handle.ping()
    except Exception as e:
        handle.close()
        raise DatabaseConnectionError(
            f"cannot ping {dialect} database: {e}", details={"driver": dialect}
        ) from e
    return handle
