"""Select, enrich and post-process the tables of one database."""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Set

from .database.base import SchemaIntrospector
from .database.models import Table
from .database.type_mappers import GoTypeMapper, TypeMapper
from .errors import IntrospectionError, PTSError
from .project_config import ProjectConfig, TableComments

logger = logging.getLogger(__name__)


@dataclass
class TableFilter:
    """Decides which listed tables are exported.

    A non-empty allow-list wins outright and the deny rules are not
    consulted. Otherwise a table is dropped when its name equals a disabled
    name or matches a disabled pattern.
    """
    only_tables: List[str] = field(default_factory=list)
    disabled_names: Set[str] = field(default_factory=set)
    disabled_patterns: List[Pattern] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: ProjectConfig) -> "TableFilter":
        only_tables: List[str] = []
        for name in config.only_table:
            name = name.strip()
            if name and name not in only_tables:
                only_tables.append(name)
        return cls(
            only_tables=only_tables,
            disabled_names=set(config.disabled_names),
            disabled_patterns=list(config.disabled_patterns),
        )

    def allows(self, name: str) -> bool:
        if self.only_tables:
            return name in self.only_tables
        if name in self.disabled_names:
            return False
        return not any(pattern.search(name) for pattern in self.disabled_patterns)

    def apply(self, tables: List[Table]) -> List[Table]:
        """Keep allowed tables, preserving their listed order."""
        return [table for table in tables if self.allows(table.name)]


@dataclass
class SchemaSnapshot:
    """Everything the templates receive."""
    tables: List[Table]
    all_table_columns: List[str]


def apply_comment_fallbacks(tables: List[Table], comments: Dict[str, TableComments]) -> None:
    """Fill empty or self-named comments from configuration.

    A real comment (non-empty and different from the identifier) is never
    replaced.
    """
    for table in tables:
        fallback = comments.get(table.name)
        if fallback is None:
            continue
        if fallback.comment and table.comment in ("", table.name):
            table.comment = fallback.comment
        for column in table.columns:
            column_comment = fallback.columns.get(column.name)
            if column_comment and column.comment in ("", column.name):
                column.comment = column_comment


def collect_column_names(tables: List[Table]) -> List[str]:
    """Distinct column names across all tables, in first-seen order."""
    seen: Set[str] = set()
    names: List[str] = []
    for table in tables:
        for column in table.columns:
            if column.name in seen:
                continue
            seen.add(column.name)
            names.append(column.name)
    return names


def get_all_tables(
    config: ProjectConfig,
    introspector: SchemaIntrospector,
    type_mapper: Optional[TypeMapper] = None,
    timestamp: Optional[int] = None,
) -> List[Table]:
    """List, filter, enrich and post-process the configured tables.

    Args:
        config: Project configuration (scope, filters, prefix, comments)
        introspector: Dialect introspector bound to an open connection
        type_mapper: Column type mapper (Go by default)
        timestamp: Generation timestamp shared by every table; now by default

    Returns:
        Tables in listing order, fully enriched

    Raises:
        ConfigError: if the database scope cannot be resolved
        IntrospectionError: if listing or enriching any table fails
    """
    type_mapper = type_mapper or GoTypeMapper()
    scope = config.resolve_scope()
    table_filter = TableFilter.from_config(config)

    try:
        listed = introspector.get_tables(scope, table_filter.only_tables)
    except PTSError:
        raise
    except Exception as e:
        raise IntrospectionError(f"failed to list tables: {e}", details={"scope": scope}) from e

    tables = table_filter.apply(listed)
    logger.info("Selected %d of %d tables", len(tables), len(listed))

    introspector.populate_tables(tables)

    if timestamp is None:
        timestamp = int(time.time())
    prefix = config.database.table_prefix
    for table in tables:
        if not table.comment:
            table.comment = table.name
        table.derive_type_names(prefix, timestamp)
        for column in table.columns:
            column.derive(type_mapper)

    apply_comment_fallbacks(tables, config.comments)
    return tables


def build_snapshot(
    config: ProjectConfig,
    introspector: SchemaIntrospector,
    type_mapper: Optional[TypeMapper] = None,
    timestamp: Optional[int] = None,
) -> SchemaSnapshot:
    """Collect tables plus the global column list for rendering."""
    tables = get_all_tables(config, introspector, type_mapper=type_mapper, timestamp=timestamp)
    return SchemaSnapshot(tables=tables, all_table_columns=collect_column_names(tables))
