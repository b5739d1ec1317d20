"""SQLite schema introspector."""

import logging
from typing import List, Optional, Sequence

from ..errors import IntrospectionError
from ..project_config import SQLITE
from .base import SchemaIntrospector
from .models import Column, Table

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SQLiteIntrospector(SchemaIntrospector):
    """Reads sqlite_master and PRAGMA table_info.

    SQLite has no schemas and no comments; table comments stay empty
    until configuration fills them.
    """

    DIALECT = SQLITE

    def get_tables(self, schema: str = "", only_tables: Optional[Sequence[str]] = None) -> List[Table]:
        sql = "SELECT name, sql AS definition FROM sqlite_master WHERE type = 'table' AND name <> 'sqlite_sequence'"
        params: List[str] = []
        if only_tables:
            sql += " AND name IN (" + ", ".join(["?"] * len(only_tables)) + ")"
            params.extend(only_tables)
        sql += " ORDER BY name ASC"

        rows = self.handle.query(sql, params)
        return [Table(name=row["name"], definition=row["definition"] or "") for row in rows]

    def get_columns(self, schema: str, table: str) -> List[Column]:
        if not table:
            return []
        rows = self.handle.query(f"PRAGMA table_info({quote_identifier(table)})")
        columns = []
        for row in rows:
            column = Column(
                name=row["name"],
                table=table,
                ordinal_position=row["cid"],
                column_type=row["type"],
                is_nullable="no" if row["notnull"] else "yes",
                column_default=row["dflt_value"],
            )
            if row["pk"]:
                column.extra = "auto_increment"
            columns.append(column)
        return columns

    def get_table_definition(self, table: Table) -> str:
        # Captured from sqlite_master by get_tables()
        return table.definition

    def populate_tables(self, tables: List[Table]) -> None:
        for table in tables:
            try:
                table.columns = self.get_columns(table.database, table.name)
            except Exception as e:
                raise IntrospectionError(
                    f"failed to read table {table.name}: {e}", details={"table": table.name}
                ) from e
            for column in table.columns:
                if not table.auto_increment_column and column.is_auto_increment:
                    table.auto_increment_column = column.name
            self.get_table_definition(table)
            logger.debug("Read SQLite table %s (%d columns)", table.name, len(table.columns))
