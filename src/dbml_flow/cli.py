"""Command line interface for DBML Flow."""

import logging
import sys
from dataclasses import asdict, replace
from json import dumps
from pathlib import Path
from sys import stdin, stdout
from typing import Literal, TypeAlias

from cyclopts import App
from rich.console import Console
from rich.table import Table

from dbml import Diagnostic, Schema, find_dangling_references, parse_dbml, schema_to_dbml
from diagram import (
    DiagramState,
    diagram_to_html,
    read_only_sqlite,
    render_to_dict,
    sqlite_to_schema,
)
from diagram.render import json_default
from layout import LayoutConfig, load_layout_config

app = App(help="Interactive ER diagrams from DBML schemas")

Format: TypeAlias = Literal["table", "json"]

console = Console()
err_console = Console(stderr=True)

# Constants
STDIN = Path("-")
DBML_EXTENSIONS = {".dbml", ".txt", ""}
SQLITE_EXTENSIONS = {".sqlite", ".db", ".sqlite3"}


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[bold red]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print success message to stderr."""
    err_console.print(f"[bold green]✓[/] {message}")


def print_info(message: str) -> None:
    """Print info message to stderr."""
    err_console.print(f"[bold blue]i[/] {message}")


def print_warning(message: str) -> None:
    """Print warning message to stderr."""
    err_console.print(f"[bold yellow]![/] {message}")


def configure_logging(*, verbose: bool) -> None:
    """Send library debug logging to stderr when asked for."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


def validate_source(source: Path) -> None:
    """Validate schema source location."""
    if source == STDIN:
        return
    if not source.exists():
        print_error(f"Schema file does not exist: {source}")
        sys.exit(1)
    suffix = source.suffix.lower()
    if suffix not in DBML_EXTENSIONS | SQLITE_EXTENSIONS:
        print_error(
            f"Schema file has invalid extension: "
            f"{', '.join(sorted((DBML_EXTENSIONS | SQLITE_EXTENSIONS) - {''}))}",
        )
        sys.exit(1)


def read_schema(source: Path, diagnostics: list[Diagnostic]) -> Schema:
    """Read DBML text or reflect a SQLite database."""
    if source == STDIN:
        return parse_dbml(stdin.read(), diagnostics=diagnostics)
    if source.suffix.lower() in SQLITE_EXTENSIONS:
        return sqlite_to_schema(read_only_sqlite(source))
    return parse_dbml(source.read_text(encoding="utf-8"), diagnostics=diagnostics)


def report_diagnostics(schema: Schema, diagnostics: list[Diagnostic], *, strict: bool) -> None:
    """Print parse and reference problems; fail in strict mode."""
    problems = [*diagnostics, *find_dangling_references(schema)]
    for problem in problems:
        print_warning(str(problem) if problem.line else problem.message)
    if strict and problems:
        print_error(f"{len(problems)} problem(s) found in strict mode")
        sys.exit(1)


def resolve_config(config: Path | None, seed: int | None) -> LayoutConfig:
    """Load layout settings, applying a seed override."""
    try:
        layout_config = load_layout_config(config) if config else LayoutConfig()
        if seed is not None:
            layout_config = replace(layout_config, seed=seed)
    except (OSError, ValueError) as e:
        print_error(f"Invalid layout config: {e}")
        sys.exit(1)
    return layout_config


def format_schema_table(schema: Schema) -> None:
    """Format tables and relationships as rich tables."""
    tables = Table(title="Tables")
    tables.add_column("Table", style="bold cyan")
    tables.add_column("Columns")
    tables.add_column("Primary Key", style="bold yellow")
    for table in schema.tables:
        tables.add_row(
            table.name,
            ", ".join(f"{col.name} {col.type}" for col in table.columns),
            ", ".join(col.name for col in table.columns if col.is_primary),
        )
    console.print(tables)

    relationships = Table(title="Relationships")
    relationships.add_column("From", style="bold cyan")
    relationships.add_column("Cardinality")
    relationships.add_column("To", style="bold cyan")
    for rel in schema.relationships:
        relationships.add_row(str(rel.source), rel.cardinality.label, str(rel.target))
    console.print(relationships)


def format_layout_table(state: DiagramState) -> None:
    """Format table positions as a rich table."""
    table = Table(title="Layout")
    table.add_column("Table", style="bold cyan")
    for heading in ("X", "Y", "Width", "Height"):
        table.add_column(heading, justify="right")
    for node in state.nodes():
        table.add_row(
            node.id,
            f"{node.x:.1f}",
            f"{node.y:.1f}",
            f"{node.width:.0f}",
            f"{node.height:.0f}",
        )
    console.print(table)


@app.command
def parse(
    source: Path,
    fmt: Format = "table",
    *,
    strict: bool = False,
    verbose: bool = False,
) -> None:
    """Parse a schema and list its tables and relationships."""
    configure_logging(verbose=verbose)
    validate_source(source)
    print_info(f"Source: {source}")

    diagnostics: list[Diagnostic] = []
    schema = read_schema(source, diagnostics)
    report_diagnostics(schema, diagnostics, strict=strict)

    if fmt == "json":
        stdout.write(
            dumps(
                {
                    "tables": [asdict(table) for table in schema.tables],
                    "relationships": [asdict(rel) for rel in schema.relationships],
                },
            ),
        )
    elif fmt == "table":
        format_schema_table(schema)

    print_success(
        f"Parsed {len(schema.tables)} tables and "
        f"{len(schema.relationships)} relationships",
    )


@app.command
def layout(
    source: Path,
    fmt: Literal["table", "json", "html"] = "table",
    *,
    config: Path | None = None,
    seed: int | None = None,
    title: str = "ER Diagram",
    strict: bool = False,
    verbose: bool = False,
) -> None:
    """Lay out a schema and print positions, the render model or HTML."""
    configure_logging(verbose=verbose)
    validate_source(source)
    if config is not None and not config.exists():
        print_error(f"Config file does not exist: {config}")
        sys.exit(1)

    print_info(f"Source: {source}")
    print_info(f"Output format: {fmt}")

    diagnostics: list[Diagnostic] = []
    schema = read_schema(source, diagnostics)
    report_diagnostics(schema, diagnostics, strict=strict)

    state = DiagramState(resolve_config(config, seed))
    with err_console.status("Running layout simulation..."):
        state.load_schema(schema)

    if fmt == "json":
        stdout.write(dumps(render_to_dict(state.nodes(), state.edges()), default=json_default))
    elif fmt == "html":
        stdout.write(diagram_to_html(state, title))
    elif fmt == "table":
        format_layout_table(state)

    print_success(f"Placed {len(schema.tables)} tables")


@app.command
def reflect(sqlite_location: Path, *, verbose: bool = False) -> None:
    """Print DBML for the tables of a SQLite database."""
    configure_logging(verbose=verbose)
    validate_source(sqlite_location)
    if sqlite_location.suffix.lower() not in SQLITE_EXTENSIONS:
        print_error(
            f"Database file has invalid extension: {', '.join(sorted(SQLITE_EXTENSIONS))}",
        )
        sys.exit(1)
    print_info(f"Source database: {sqlite_location}")

    schema = sqlite_to_schema(read_only_sqlite(sqlite_location))
    stdout.write(schema_to_dbml(schema))

    print_success(f"Reflected {len(schema.tables)} tables")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
