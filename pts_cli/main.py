"""pts - Main entry point."""

import logging
import os
import sys
from typing import List

import typer
from rich.console import Console

from .app import App
from .config import settings
from .errors import PTSError
from .project_config import example_config
from .render import CMD_CUSTOM, CMD_REPLACE, CMD_SCHEMA, CMD_TABLE

app = typer.Typer(
    name="pts",
    help="Parse database table structures, supports PostgreSQL, MySQL, SQLite",
    add_completion=False,
)

console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr so stdout only carries generated output."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def resolve_config_path(path: str, command: str) -> str:
    """Fall back to PTS_<COMMAND>_CONFIG when the given file does not exist."""
    if os.path.exists(path):
        return path
    value = os.environ.get(f"PTS_{command.upper()}_CONFIG", "")
    if value and os.path.exists(value):
        return value
    return path


def parse_table_list(value: str) -> List[str]:
    """Split a comma-separated table list, dropping blanks and duplicates."""
    tables: List[str] = []
    for name in value.split(","):
        name = name.strip()
        if name and name not in tables:
            tables.append(name)
    return tables


def start(command: str, config_file: str, table: str, verbose: bool) -> None:
    configure_logging(verbose)
    try:
        cli = App.from_config_file(
            resolve_config_path(config_file, command),
            only_tables=parse_table_list(table),
        )
        output = cli.run(command)
    except (PTSError, ImportError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    sys.stdout.write(output)
    sys.stdout.flush()


def _register(command: str, short_help: str, help_text: str) -> None:
    default_config = f"pts-{command}.yaml"

    @app.command(command, short_help=short_help, help=help_text)
    def run(
        config_file: str = typer.Option(
            default_config, "--config", "-c",
            help=f"{command.capitalize()} configure file path. PTS_{command.upper()}_CONFIG",
        ),
        table: str = typer.Option(
            "", "--table", "-t",
            help="Only table lists, multiple uses ',' concatenation. Example: table1,table2,table3",
        ),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Write debug logs to stderr"),
    ):
        start(command, config_file, table, verbose)


@app.command("config")
def show_config():
    """Print an example configuration."""
    sys.stdout.write(example_config())


_register(CMD_CUSTOM, "Custom export", "Render tables with the template_file_custom template.")
_register(
    CMD_REPLACE,
    "Database identifier mapping",
    "Commonly used to replace identifiers in a database.",
)
_register(
    CMD_SCHEMA,
    "Database table structure",
    "Parse table structures into Go values so table and column names are not hard-coded.",
)
_register(
    CMD_TABLE,
    "Database table data",
    "Parse the database table structure and define the corresponding Go structs.",
)


if __name__ == "__main__":
    app()
