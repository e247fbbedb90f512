"""Build a schema from an existing SQLite database."""

from pathlib import Path
from typing import Any
from warnings import catch_warnings, filterwarnings

from sqlalchemy import Engine, MetaData, create_engine
from sqlalchemy.exc import SAWarning
from sqlalchemy.schema import Column as SqlColumn
from sqlalchemy.schema import Table as SqlTable

from dbml import Cardinality, Column, Relationship, Schema, Table


def read_only_sqlite(sqlite_location: Path) -> Engine:
    """Create a read-only SQLAlchemy engine for SQLite database."""
    connection_string = f"sqlite:///{sqlite_location}?mode=ro"
    return create_engine(connection_string, connect_args={"uri": True})


def _column_from_sqla(column: SqlColumn[Any]) -> Column:
    """Derive a diagram column from a reflected SQLAlchemy column."""
    return Column(
        name=column.name,
        type=str(column.type),
        is_primary=column.primary_key,
        note=column.comment,
    )


def _table_from_sqla(table: SqlTable) -> Table:
    """Derive a diagram table from a reflected SQLAlchemy table."""
    return Table(
        name=table.name,
        columns=tuple(_column_from_sqla(column) for column in table.columns),
        note=table.comment,
    )


def _relationships_from_sqla(table: SqlTable) -> list[Relationship]:
    """Each foreign key column pair points many child rows at one parent row."""
    return [
        Relationship(
            from_table=table.name,
            from_column=column.name,
            to_table=fk.column.table.name,
            to_column=fk.column.name,
            cardinality=Cardinality.ONE_TO_MANY,
        )
        for column in table.columns
        for fk in column.foreign_keys
    ]


def reflect_tables(sqlite_database: Engine) -> list[SqlTable]:
    """Reflect tables in dependency order."""
    metadata = MetaData()
    metadata.reflect(bind=sqlite_database)
    with catch_warnings():
        filterwarnings("ignore", category=SAWarning)
        return metadata.sorted_tables


def sqlite_to_schema(sqlite_database: Engine) -> Schema:
    """Generate a diagram schema from a SQLite database."""
    tables = reflect_tables(sqlite_database)
    return Schema(
        tables=tuple(_table_from_sqla(table) for table in tables),
        relationships=tuple(
            relationship
            for table in tables
            for relationship in _relationships_from_sqla(table)
        ),
    )
