"""PostgreSQL schema introspector."""

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from ..errors import IntrospectionError
from ..project_config import POSTGRESQL
from .base import SchemaIntrospector
from .connection import DatabaseHandle
from .models import Column, Table

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).parent / "sql"

# Default expression of a serial column
SEQUENCE_DEFAULT = re.compile(r"^nextval\('([A-Za-z0-9_]+)'::regclass\)$")

# CREATE statements emitted by show_create_table_schema() without IF NOT EXISTS
CREATE_STATEMENT = re.compile(r"CREATE (TABLE|INDEX|UNIQUE INDEX) (?!IF NOT EXISTS)")

COLUMNS_SQL = """
    SELECT
        table_schema AS database,
        table_name AS "table",
        column_name AS name,
        ordinal_position,
        column_default,
        is_nullable,
        data_type,
        character_maximum_length,
        character_octet_length,
        numeric_precision,
        numeric_scale,
        character_set_name,
        collation_name
    FROM information_schema.columns
    WHERE table_schema = %s AND table_name = %s
    ORDER BY ordinal_position ASC
"""

TABLE_COMMENT_SQL = """
    SELECT CAST(d.description AS VARCHAR) AS comment
    FROM pg_tables t
             JOIN pg_namespace n ON n.nspname = t.schemaname
             JOIN pg_class c ON c.relname = t.tablename AND c.relnamespace = n.oid
             LEFT JOIN pg_description d ON d.objoid = c.oid AND d.objsubid = 0
    WHERE t.schemaname = %s AND t.tablename = %s
    LIMIT 1
"""

COLUMN_COMMENT_SQL = """
    SELECT COALESCE(d.description, '') AS comment
    FROM pg_class c
             JOIN pg_namespace n ON n.oid = c.relnamespace
             JOIN pg_attribute a ON a.attrelid = c.oid
             JOIN pg_type t ON t.oid = a.atttypid
             JOIN pg_description d ON d.objoid = a.attrelid AND d.objsubid = a.attnum
    WHERE n.nspname = %s AND c.relname = %s AND a.attname = %s AND a.attnum > 0
    ORDER BY a.attnum ASC
    LIMIT 1
"""


def _read_sql(name: str) -> str:
    return (SQL_DIR / name).read_text(encoding="utf-8")


@contextmanager
def ddl_function_installed(handle: DatabaseHandle) -> Iterator[None]:
    """Install show_create_table_schema() for the duration of a run.

    Requires permission to create functions in the target database. The
    function is dropped on exit; a failing drop is logged so it never hides
    the run's own outcome.
    """
    try:
        handle.execute(_read_sql("show_create_table.sql"))
    except Exception as e:
        raise IntrospectionError(
            f"cannot install show_create_table_schema(): {e}",
            details={"function": "show_create_table_schema"},
        ) from e
    logger.debug("Installed show_create_table_schema()")
    try:
        yield
    finally:
        try:
            handle.execute(_read_sql("drop_show_create_table.sql"))
            logger.debug("Dropped show_create_table_schema()")
        except Exception as e:
            logger.warning("Failed to drop show_create_table_schema(): %s", e)


def make_idempotent(ddl: str) -> str:
    """Rewrite CREATE TABLE/INDEX statements into IF NOT EXISTS forms."""
    return CREATE_STATEMENT.sub(r"CREATE \1 IF NOT EXISTS ", ddl)


class PostgreSQLIntrospector(SchemaIntrospector):
    """Reads tables from information_schema and comments from pg_description."""

    DIALECT = POSTGRESQL

    def get_tables(self, schema: str, only_tables: Optional[Sequence[str]] = None) -> List[Table]:
        sql = (
            "SELECT table_schema AS database, table_name AS name "
            "FROM information_schema.tables "
            "WHERE table_schema = %s AND table_type = 'BASE TABLE'"
        )
        params: List[str] = [schema]
        if only_tables:
            sql += " AND table_name IN (" + ", ".join(["%s"] * len(only_tables)) + ")"
            params.extend(only_tables)
        sql += " ORDER BY table_name ASC"

        rows = self.handle.query(sql, params)
        return [Table(name=row["name"], database=row["database"]) for row in rows]

    def get_columns(self, schema: str, table: str) -> List[Column]:
        if not schema or not table:
            return []
        rows = self.handle.query(COLUMNS_SQL, [schema, table])
        columns = [Column.from_row(row) for row in rows]
        for column in columns:
            if column.name:
                column.comment = self.get_column_comment(schema, table, column.name)
        return columns

    def get_column_comment(self, schema: str, table: str, column: str) -> str:
        """Comment of one column; empty when none is recorded."""
        rows = self.handle.query(COLUMN_COMMENT_SQL, [schema, table, column])
        if not rows:
            return ""
        return rows[0]["comment"] or ""

    def get_table_comment(self, table: Table) -> str:
        """Set and return the table comment; an absent comment leaves it unchanged."""
        rows = self.handle.query(TABLE_COMMENT_SQL, [table.database, table.name])
        if rows and rows[0]["comment"] is not None:
            table.comment = rows[0]["comment"]
        return table.comment

    def get_table_definition(self, table: Table) -> str:
        create_sequences = []
        for column in table.columns:
            if column.column_default is None:
                continue
            column.column_default = column.column_default.replace('"', "")
            match = SEQUENCE_DEFAULT.match(column.column_default)
            if match:
                create_sequences.append(f"CREATE SEQUENCE IF NOT EXISTS {match.group(1)} START 1;\n")
                table.auto_increment_column = column.name

        rows = self.handle.query(
            "SELECT show_create_table_schema(%s, %s) AS definition",
            [table.database, table.name],
        )
        ddl = rows[0]["definition"] if rows else ""

        table.definition = "".join(create_sequences) + make_idempotent(ddl or "")
        return table.definition

    def populate_table(self, table: Table) -> None:
        """Columns with their comments, then the table comment, then the DDL."""
        table.columns = self.get_columns(table.database, table.name)
        self.get_table_comment(table)
        self.get_table_definition(table)
        logger.debug("Read PostgreSQL table %s.%s (%d columns)", table.database, table.name, len(table.columns))

    def populate_tables(self, tables: List[Table]) -> None:
        self._fan_out(tables, self.populate_table)
