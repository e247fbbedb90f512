"""Render a schema back into DBML text."""

from re import fullmatch

from dbml.types import DEFAULT_HEADER_COLOR, Column, Relationship, Schema, Table

INDENT = "  "


def quote_name(name: str) -> str:
    """Quote identifiers that are not plain words."""
    if all(fullmatch(r"\w+", part) for part in name.split(".")):
        return name
    return f'"{name}"'


def quote_string(value: str) -> str:
    """Quote a string literal with a delimiter it does not contain."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    return f"'''{value}'''"


def _render_type(column_type: str) -> str:
    if fullmatch(r"\w+(\([\w\s,]*\))?", column_type):
        return column_type
    return f'"{column_type}"'


def _render_settings(settings: list[str]) -> str:
    return f" [{', '.join(settings)}]" if settings else ""


def render_column(column: Column) -> str:
    """Render a column line without its inline references."""
    settings: list[str] = []
    if column.is_primary:
        settings.append("pk")
    if column.note is not None:
        settings.append(f"note: {quote_string(column.note)}")
    return (
        f"{INDENT}{quote_name(column.name)} {_render_type(column.type)}"
        f"{_render_settings(settings)}"
    )


def render_table(table: Table) -> str:
    """Render a table block."""
    settings: list[str] = []
    if table.header_color != DEFAULT_HEADER_COLOR:
        settings.append(f"headercolor: {table.header_color}")
    if table.note is not None:
        settings.append(f"note: {quote_string(table.note)}")
    lines = [f"Table {quote_name(table.name)}{_render_settings(settings)} {{"]
    lines.extend(render_column(column) for column in table.columns)
    lines.append("}")
    return "\n".join(lines)


def render_relationship(relationship: Relationship) -> str:
    """Render a standalone ``Ref:`` line."""
    source = f"{quote_name(relationship.from_table)}.{quote_name(relationship.from_column)}"
    target = f"{quote_name(relationship.to_table)}.{quote_name(relationship.to_column)}"
    return f"Ref: {source} {relationship.cardinality} {target}"


def schema_to_dbml(schema: Schema) -> str:
    """Render tables followed by their relationships as DBML."""
    blocks = [render_table(table) for table in schema.tables]
    if schema.relationships:
        blocks.append("\n".join(render_relationship(rel) for rel in schema.relationships))
    return "\n\n".join(blocks) + "\n"
