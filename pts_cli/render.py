"""Template rendering for collected schemas.

Templates are Jinja2. Besides the snapshot (``tables``,
``all_table_columns``) they can call ``add``, ``is_not_empty`` and
``mark``, and use the ``pascal``, ``camel`` and ``underline`` filters.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateError

from . import naming
from .aggregator import SchemaSnapshot
from .errors import TemplateRenderError
from .project_config import ProjectConfig

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

CMD_CUSTOM = "custom"
CMD_REPLACE = "replace"
CMD_SCHEMA = "schema"
CMD_TABLE = "table"

RENDER_COMMANDS = (CMD_CUSTOM, CMD_REPLACE, CMD_SCHEMA, CMD_TABLE)

# Packaged default per command; custom has none
DEFAULT_TEMPLATES = {
    CMD_REPLACE: "default_replace.j2",
    CMD_SCHEMA: "default_schema.j2",
    CMD_TABLE: "default_table.j2",
}


def add(x: int, y: int) -> int:
    return x + y


def is_not_empty(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def mark(quote: str, name: str) -> str:
    """Quote each dot-separated part of an identifier.

    mark("`", "prefix.user") gives `prefix`.`user`. A double quote is
    emitted backslash-escaped so the result can sit inside a string literal.
    """
    quote = quote.strip()
    if quote == '"':
        quote = '\\"'
    return quote + f"{quote}.{quote}".join(name.split(".")) + quote


def default_helpers() -> Dict[str, Callable[..., Any]]:
    return {
        "add": add,
        "is_not_empty": is_not_empty,
        "mark": mark,
    }


class TemplateRenderer:
    """Renders one template source against a SchemaSnapshot."""

    def __init__(self, source: str, name: str = "template", helpers: Optional[Dict[str, Callable[..., Any]]] = None):
        self.name = name
        self._env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._env.globals.update(helpers if helpers is not None else default_helpers())
        self._env.filters["pascal"] = naming.pascal
        self._env.filters["camel"] = naming.camel
        self._env.filters["underline"] = naming.underline

        try:
            self._template = self._env.from_string(source)
        except TemplateError as e:
            raise TemplateRenderError(f"invalid template {name}: {e}", details={"template": name}) from e

    def render(self, snapshot: SchemaSnapshot) -> str:
        try:
            return self._template.render(
                tables=snapshot.tables,
                all_table_columns=snapshot.all_table_columns,
            )
        except TemplateError as e:
            raise TemplateRenderError(f"failed to render template {self.name}: {e}", details={"template": self.name}) from e


def load_template(command: str, config: ProjectConfig) -> str:
    """Return the template source for a render command.

    The file configured for the command wins; otherwise the packaged
    default is used (empty for ``custom``).
    """
    if command not in RENDER_COMMANDS:
        raise TemplateRenderError(f"invalid command: {command}", details={"command": command})

    template_file = config.template_file_for(command).strip()
    if template_file:
        path = Path(template_file).expanduser()
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateRenderError(
                f"cannot read template file {template_file}: {e}", details={"path": template_file}
            ) from e
        logger.debug("Using template file %s for %s", path, command)
        return source

    default = DEFAULT_TEMPLATES.get(command)
    if default is None:
        return ""
    return (TEMPLATE_DIR / default).read_text(encoding="utf-8")
