"""Database introspection module for pts-cli.

This module provides dialect-independent introspection with specific
implementations for MySQL, PostgreSQL and SQLite.
"""

from .models import Column, Table
from .base import SchemaIntrospector
from .connection import DatabaseHandle, open_database
from .type_mappers import TypeMapper, GoTypeMapper, SemanticType
from .mysql import MySQLIntrospector
from .postgresql import PostgreSQLIntrospector, ddl_function_installed
from .sqlite import SQLiteIntrospector
from ..errors import UnsupportedDriverError

INTROSPECTORS = {
    MySQLIntrospector.DIALECT: MySQLIntrospector,
    PostgreSQLIntrospector.DIALECT: PostgreSQLIntrospector,
    SQLiteIntrospector.DIALECT: SQLiteIntrospector,
}


def create_introspector(handle: DatabaseHandle, max_workers: int = 8) -> SchemaIntrospector:
    """Select the introspector matching the handle's dialect."""
    introspector_class = INTROSPECTORS.get(handle.dialect)
    if introspector_class is None:
        raise UnsupportedDriverError(handle.dialect)
    return introspector_class(handle, max_workers=max_workers)


__all__ = [
    # Data models
    "Column",
    "Table",
    # Base classes
    "SchemaIntrospector",
    "DatabaseHandle",
    "open_database",
    "create_introspector",
    # Type mappers
    "TypeMapper",
    "GoTypeMapper",
    "SemanticType",
    # Introspectors
    "MySQLIntrospector",
    "PostgreSQLIntrospector",
    "SQLiteIntrospector",
    "ddl_function_installed",
]
