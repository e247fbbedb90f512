"""Anchor-side selection and hover highlighting.

Both computations are pure: they are recomputed from current positions and
edges on every change and never patched in place.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, NamedTuple

from dbml import Cardinality, ColumnRef

if TYPE_CHECKING:
    from dbml import Relationship
    from layout import LayoutNode


class AnchorSide(StrEnum):
    """Side of a table rectangle an edge attaches to."""

    LEFT = "left"
    RIGHT = "right"


class HandleRole(StrEnum):
    """Whether a handle starts or ends an edge."""

    SOURCE = "source"
    TARGET = "target"


class AnchorSides(NamedTuple):
    """Anchor sides of both ends of an edge."""

    source: AnchorSide
    target: AnchorSide


# Suffixes used by the rendering surface.
_HANDLE_SUFFIXES = {
    (HandleRole.SOURCE, AnchorSide.LEFT): "-left-source",
    (HandleRole.TARGET, AnchorSide.RIGHT): "-right-target",
    (HandleRole.SOURCE, AnchorSide.RIGHT): "-source",
    (HandleRole.TARGET, AnchorSide.LEFT): "-target",
}


def anchor_sides(source: LayoutNode | None, target: LayoutNode | None) -> AnchorSides:
    """Pick the facing sides of two tables from their horizontal order."""
    if source is None or target is None or source.x < target.x:
        return AnchorSides(AnchorSide.RIGHT, AnchorSide.LEFT)
    return AnchorSides(AnchorSide.LEFT, AnchorSide.RIGHT)


def handle_id(column: str, role: HandleRole, side: AnchorSide) -> str:
    """Identifier of a column's connection point on one side of a table.

    Handles are output only. Column names may themselves end in ``-left`` or
    ``-right``, so endpoints are always kept as ``ColumnRef`` values.
    """
    return f"{column}{_HANDLE_SUFFIXES[role, side]}"


@dataclass(frozen=True)
class DiagramEdge:
    """An edge between two table columns, as stored before styling."""

    id: str
    source_column: ColumnRef
    target_column: ColumnRef
    cardinality: Cardinality = Cardinality.ONE_TO_ONE

    @property
    def source(self) -> str:
        """Table the edge starts from."""
        return self.source_column.table

    @property
    def target(self) -> str:
        """Table the edge points at."""
        return self.target_column.table

    def handles(self, sides: AnchorSides) -> tuple[str, str]:
        """Source and target handle identifiers for the given sides."""
        return (
            handle_id(self.source_column.column, HandleRole.SOURCE, sides.source),
            handle_id(self.target_column.column, HandleRole.TARGET, sides.target),
        )

    def touches(self, table: str) -> bool:
        """Whether either end of the edge is ``table``."""
        return table in {self.source, self.target}


def edges_from_relationships(relationships: Iterable[Relationship]) -> list[DiagramEdge]:
    """One edge per relationship, numbered in declaration order."""
    return [
        DiagramEdge(
            id=f"edge-{index}",
            source_column=rel.source,
            target_column=rel.target,
            cardinality=rel.cardinality,
        )
        for index, rel in enumerate(relationships)
    ]


@dataclass(frozen=True)
class Highlight:
    """Derived highlight sets for the current hover state."""

    hovered: str | None = None
    edges: frozenset[str] = frozenset()
    columns: frozenset[ColumnRef] = frozenset()
    tables: frozenset[str] = frozenset()

    @property
    def idle(self) -> bool:
        """True when no table is hovered."""
        return self.hovered is None

    @property
    def columns_by_table(self) -> dict[str, frozenset[str]]:
        """Highlighted column names grouped by table."""
        grouped: dict[str, set[str]] = defaultdict(set)
        for ref in self.columns:
            grouped[ref.table].add(ref.column)
        return {table: frozenset(names) for table, names in grouped.items()}

    def columns_for(self, table: str) -> frozenset[str]:
        """Highlighted columns of one table."""
        return frozenset(ref.column for ref in self.columns if ref.table == table)

    def is_related(self, table: str) -> bool:
        """Whether a table stays undimmed: everything is related while idle."""
        return self.idle or table in self.tables


IDLE = Highlight()


def highlight(node_id: str | None, edges: Iterable[DiagramEdge]) -> Highlight:
    """Compute the edges and columns to highlight while ``node_id`` is hovered."""
    if node_id is None:
        return IDLE

    included = [edge for edge in edges if edge.touches(node_id)]
    return Highlight(
        hovered=node_id,
        edges=frozenset(edge.id for edge in included),
        columns=frozenset(
            ref for edge in included for ref in (edge.source_column, edge.target_column)
        ),
        tables=frozenset({node_id}).union(
            table for edge in included for table in (edge.source, edge.target)
        ),
    )


class HoverState:
    """Two-state machine: idle, or hovering one table.

    Every transition recomputes the highlight from scratch.
    """

    def __init__(self, edges: Sequence[DiagramEdge] = ()) -> None:
        """Start idle over the given edges."""
        self._edges = edges
        self._highlight = IDLE

    @property
    def hovered(self) -> str | None:
        """Currently hovered table, or None when idle."""
        return self._highlight.hovered

    @property
    def highlight(self) -> Highlight:
        """Highlight of the current state."""
        return self._highlight

    def enter(self, node_id: str) -> Highlight:
        """Pointer entered a table; moves directly between hovered tables."""
        self._highlight = highlight(node_id, self._edges)
        return self._highlight

    def leave(self) -> Highlight:
        """Pointer left the hovered table."""
        self._highlight = IDLE
        return self._highlight

    def reset(self, edges: Sequence[DiagramEdge]) -> None:
        """Replace the edges of a new model generation and go idle."""
        self._edges = edges
        self._highlight = IDLE
