"""MySQL schema introspector."""

import logging
import re
from typing import List, Optional, Sequence

from ..project_config import MYSQL
from .base import SchemaIntrospector
from .models import Column, Table

logger = logging.getLogger(__name__)

# Table option carrying the next auto-increment value
AUTO_INCREMENT_OPTION = re.compile(r"(AUTO_INCREMENT|auto_increment)=\d+")

COLUMNS_SQL = """
    SELECT
        TABLE_SCHEMA AS `database`,
        TABLE_NAME AS `table`,
        COLUMN_NAME AS name,
        ORDINAL_POSITION AS ordinal_position,
        COLUMN_DEFAULT AS column_default,
        IS_NULLABLE AS is_nullable,
        DATA_TYPE AS data_type,
        CHARACTER_MAXIMUM_LENGTH AS character_maximum_length,
        CHARACTER_OCTET_LENGTH AS character_octet_length,
        NUMERIC_PRECISION AS numeric_precision,
        NUMERIC_SCALE AS numeric_scale,
        CHARACTER_SET_NAME AS character_set_name,
        COLLATION_NAME AS collation_name,
        COALESCE(COLUMN_COMMENT, '') AS comment,
        COLUMN_TYPE AS column_type,
        COLUMN_KEY AS column_key,
        EXTRA AS extra
    FROM information_schema.COLUMNS
    WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
    ORDER BY ORDINAL_POSITION ASC
"""


def quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


def normalize_create_table(ddl: str) -> str:
    """Make SHOW CREATE TABLE output safe to re-apply.

    CREATE TABLE becomes CREATE TABLE IF NOT EXISTS and the auto-increment
    start value is reset to 1.
    """
    ddl = ddl.replace("CREATE TABLE", "CREATE TABLE IF NOT EXISTS")
    return AUTO_INCREMENT_OPTION.sub(r"\1=1", ddl)


class MySQLIntrospector(SchemaIntrospector):
    """Reads tables and columns from information_schema."""

    DIALECT = MYSQL

    def get_tables(self, schema: str, only_tables: Optional[Sequence[str]] = None) -> List[Table]:
        sql = (
            "SELECT TABLE_SCHEMA AS `database`, TABLE_NAME AS name, TABLE_COMMENT AS comment "
            "FROM information_schema.TABLES "
            "WHERE TABLE_SCHEMA = %s AND TABLE_TYPE = 'BASE TABLE'"
        )
        params: List[str] = [schema]
        if only_tables:
            sql += " AND TABLE_NAME IN (" + ", ".join(["%s"] * len(only_tables)) + ")"
            params.extend(only_tables)
        sql += " ORDER BY TABLE_NAME ASC"

        rows = self.handle.query(sql, params)
        return [
            Table(name=row["name"], database=row["database"], comment=row["comment"] or "")
            for row in rows
        ]

    def get_columns(self, schema: str, table: str) -> List[Column]:
        if not schema or not table:
            return []
        rows = self.handle.query(COLUMNS_SQL, [schema, table])
        return [Column.from_row(row) for row in rows]

    def get_table_definition(self, table: Table) -> str:
        for column in table.columns:
            if column.is_auto_increment:
                table.auto_increment_column = column.name

        sql = f"SHOW CREATE TABLE {quote_identifier(table.database)}.{quote_identifier(table.name)}"
        rows = self.handle.query(sql)
        ddl = ""
        for row in rows:
            # Columns are "Table" and "Create Table"
            ddl = list(row.values())[1]

        table.definition = normalize_create_table(ddl)
        return table.definition

    def populate_table(self, table: Table) -> None:
        """Columns and comments come from information_schema, then the DDL."""
        table.columns = self.get_columns(table.database, table.name)
        self.get_table_definition(table)
        logger.debug("Read MySQL table %s.%s (%d columns)", table.database, table.name, len(table.columns))

    def populate_tables(self, tables: List[Table]) -> None:
        self._fan_out(tables, self.populate_table)
