"""Adjacency index of columns that take part in relationships."""

from collections.abc import Iterable, Mapping
from typing import TypeAlias

from dbml.types import Relationship, Table

AdjacencyIndex: TypeAlias = Mapping[str, frozenset[str]]


def build_adjacency(
    tables: Iterable[Table],
    relationships: Iterable[Relationship],
) -> AdjacencyIndex:
    """Map each table name to the columns used as a relationship endpoint.

    Every declared table gets an entry, even when empty. Endpoints naming an
    undeclared table are indexed under their literal name.
    """
    columns: dict[str, set[str]] = {table.name: set() for table in tables}
    for relationship in relationships:
        for endpoint in (relationship.source, relationship.target):
            columns.setdefault(endpoint.table, set()).add(endpoint.column)
    return {name: frozenset(names) for name, names in columns.items()}


def related_columns(adjacency: AdjacencyIndex, table_name: str) -> frozenset[str]:
    """Columns of a table that carry connection points; empty when unknown."""
    return adjacency.get(table_name, frozenset())
