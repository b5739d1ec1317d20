"""Abstract base class for schema introspection."""

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence

from ..errors import IntrospectionError
from .connection import DatabaseHandle
from .models import Column, Table

logger = logging.getLogger(__name__)


class SchemaIntrospector(ABC):
    """Abstract base class for schema introspection.

    Each dialect turns its own metadata source into Table and Column
    objects through the same four operations.
    """

    # Override in subclasses
    DIALECT: str = ""

    def __init__(self, handle: DatabaseHandle, max_workers: int = 8):
        self.handle = handle
        self.max_workers = max(1, max_workers)

    @abstractmethod
    def get_tables(self, schema: str, only_tables: Optional[Sequence[str]] = None) -> List[Table]:
        """Get the base tables of a schema, ordered by name.

        Args:
            schema: Schema (PostgreSQL) or database (MySQL) name; ignored by SQLite
            only_tables: When non-empty, only tables with exactly these names

        Returns:
            List of Table objects
        """
        pass

    @abstractmethod
    def get_columns(self, schema: str, table: str) -> List[Column]:
        """Get all columns of a table, ordered by ordinal position.

        Returns an empty list without querying when a required name is empty.
        """
        pass

    @abstractmethod
    def get_table_definition(self, table: Table) -> str:
        """Rebuild the table's DDL.

        Sets ``table.definition`` and ``table.auto_increment_column`` and
        returns the definition.
        """
        pass

    @abstractmethod
    def populate_tables(self, tables: List[Table]) -> None:
        """Attach columns, comments and DDL to every table in place."""
        pass

    def _fan_out(self, tables: List[Table], enrich: Callable[[Table], None]) -> None:
        """Run ``enrich`` for each table on a bounded thread pool.

        Every task runs to completion. The first failure observed is raised
        after all tasks finish; later failures are dropped.
        """
        if not tables:
            return

        lock = threading.Lock()
        errors: List[IntrospectionError] = []

        def run(table: Table) -> None:
            try:
                enrich(table)
            except Exception as e:
                error = IntrospectionError(
                    f"failed to read table {table.name}: {e}",
                    details={"table": table.name, "database": table.database},
                )
                error.__cause__ = e
                with lock:
                    if errors:
                        logger.debug("Discarding error for table %s: %s", table.name, e)
                    else:
                        errors.append(error)

        workers = min(self.max_workers, len(tables))
        logger.debug("Enriching %d tables with %d workers", len(tables), workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"pts-{self.DIALECT}") as executor:
            wait([executor.submit(run, table) for table in tables])

        if errors:
            raise errors[0]
