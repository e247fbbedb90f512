"""DBML schema parsing for the diagram pipeline."""

from dbml.adjacency import AdjacencyIndex, build_adjacency, related_columns
from dbml.parser import parse_dbml
from dbml.types import (
    DEFAULT_HEADER_COLOR,
    Cardinality,
    Column,
    ColumnRef,
    Diagnostic,
    Relationship,
    Schema,
    Table,
)
from dbml.validation import find_dangling_references
from dbml.writer import schema_to_dbml

__all__ = [
    "DEFAULT_HEADER_COLOR",
    "AdjacencyIndex",
    "Cardinality",
    "Column",
    "ColumnRef",
    "Diagnostic",
    "Relationship",
    "Schema",
    "Table",
    "build_adjacency",
    "find_dangling_references",
    "parse_dbml",
    "related_columns",
    "schema_to_dbml",
]
