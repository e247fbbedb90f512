"""Referential checks that the permissive parser does not enforce."""

from dbml.types import ColumnRef, Diagnostic, Schema


def _missing(schema: Schema, endpoint: ColumnRef) -> str | None:
    table = schema.table(endpoint.table)
    if table is None:
        return f"unknown table '{endpoint.table}'"
    if table.column(endpoint.column) is None:
        return f"unknown column '{endpoint}'"
    return None


def find_dangling_references(schema: Schema) -> list[Diagnostic]:
    """Report relationship endpoints that name a missing table or column."""
    diagnostics: list[Diagnostic] = []
    for relationship in schema.relationships:
        for endpoint in (relationship.source, relationship.target):
            if problem := _missing(schema, endpoint):
                diagnostics.append(
                    Diagnostic(
                        line=0,
                        message=f"relationship {relationship.source} "
                        f"{relationship.cardinality} {relationship.target}: {problem}",
                    ),
                )
    return diagnostics
