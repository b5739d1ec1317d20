"""Wires configuration, database, aggregation and rendering for one run."""

import logging
from contextlib import nullcontext
from typing import List, Optional

from .aggregator import SchemaSnapshot, build_snapshot
from .config import Settings, settings as default_settings
from .database import create_introspector, ddl_function_installed, open_database
from .project_config import POSTGRESQL, ProjectConfig, load_project_config
from .render import TemplateRenderer, load_template

logger = logging.getLogger(__name__)


class App:
    """One pts invocation: a fresh extraction rendered through one template."""

    def __init__(self, config: ProjectConfig, settings: Optional[Settings] = None):
        self.config = config
        self.settings = settings or default_settings

    @classmethod
    def from_config_file(
        cls,
        path: str,
        only_tables: Optional[List[str]] = None,
        settings: Optional[Settings] = None,
    ) -> "App":
        """Load a YAML config; a non-empty ``only_tables`` replaces its allow-list."""
        config = load_project_config(path)
        if only_tables:
            config.only_table = list(only_tables)
        return cls(config, settings=settings)

    def collect(self) -> SchemaSnapshot:
        """Connect, read every selected table and close the connection."""
        self.config.resolve_scope()
        handle = open_database(self.config.database, connect_timeout=self.settings.connect_timeout)
        with handle:
            introspector = create_introspector(handle, max_workers=self.settings.max_workers)
            guard = ddl_function_installed(handle) if handle.dialect == POSTGRESQL else nullcontext()
            with guard:
                snapshot = build_snapshot(self.config, introspector)
        logger.info(
            "Collected %d tables, %d distinct columns",
            len(snapshot.tables),
            len(snapshot.all_table_columns),
        )
        return snapshot

    def run(self, command: str) -> str:
        """Render the output of a command (custom, replace, schema or table).

        The template is loaded and parsed before the database is touched.
        """
        renderer = TemplateRenderer(load_template(command, self.config), name=command)
        snapshot = self.collect()
        return renderer.render(snapshot)
