"""Type definitions for the parsed schema model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import NamedTuple

DEFAULT_HEADER_COLOR = "#ff7225"


class Cardinality(StrEnum):
    """One/many classification of a relationship, keyed by its DBML symbol."""

    ONE_TO_MANY = ">"
    MANY_TO_ONE = "<"
    MANY_TO_MANY = "<>"
    ONE_TO_ONE = "-"

    @classmethod
    def from_symbol(cls, symbol: str | None) -> Cardinality:
        """Map a relation symbol to a cardinality, defaulting to one-to-one."""
        try:
            return cls(symbol)
        except ValueError:
            return cls.ONE_TO_ONE

    @property
    def label(self) -> str:
        """Display label drawn on the edge."""
        return _LABELS[self]


_LABELS = {
    Cardinality.ONE_TO_MANY: "(n) -> (1)",
    Cardinality.MANY_TO_ONE: "(1) -> (n)",
    Cardinality.MANY_TO_MANY: "(n) -> (n)",
    Cardinality.ONE_TO_ONE: "(1) -> (1)",
}


class ColumnRef(NamedTuple):
    """A table/column pair identifying one relationship endpoint."""

    table: str
    column: str

    def __str__(self) -> str:
        """Render as ``table.column``."""
        return f"{self.table}.{self.column}"


@dataclass(frozen=True)
class Column:
    """A column declared inside a table."""

    name: str
    type: str
    is_primary: bool = False
    note: str | None = None


@dataclass(frozen=True)
class Table:
    """A table with its ordered columns."""

    name: str
    columns: tuple[Column, ...] = ()
    header_color: str = DEFAULT_HEADER_COLOR
    note: str | None = None

    def column(self, name: str) -> Column | None:
        """Look up a column by name."""
        return next((col for col in self.columns if col.name == name), None)


@dataclass(frozen=True)
class Relationship:
    """A reference between two columns.

    Endpoints are kept verbatim and may name tables or columns that were never
    declared.
    """

    from_table: str
    from_column: str
    to_table: str
    to_column: str
    cardinality: Cardinality = Cardinality.ONE_TO_ONE

    @property
    def source(self) -> ColumnRef:
        """Endpoint the relationship is declared from."""
        return ColumnRef(self.from_table, self.from_column)

    @property
    def target(self) -> ColumnRef:
        """Endpoint the relationship points at."""
        return ColumnRef(self.to_table, self.to_column)


class Schema(NamedTuple):
    """Parser output: tables and relationships in declaration order."""

    tables: tuple[Table, ...]
    relationships: tuple[Relationship, ...]

    def table(self, name: str) -> Table | None:
        """Look up a table by name."""
        return next((table for table in self.tables if table.name == name), None)


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while reading a schema."""

    line: int
    message: str
    text: str = field(default="", compare=False)

    def __str__(self) -> str:
        """Render as ``line N: message``."""
        return f"line {self.line}: {self.message}"
