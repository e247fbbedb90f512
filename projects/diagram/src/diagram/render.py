"""Renderable node and edge models handed to the drawing surface."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from dbml import AdjacencyIndex, Column, Table, related_columns
from diagram.interaction import AnchorSide, DiagramEdge, Highlight, anchor_sides

if TYPE_CHECKING:
    from layout import LayoutNode

# Edge styling
EDGE_WIDTH = 2
EDGE_WIDTH_HIGHLIGHTED = 3
EDGE_COLOR = "#b1b1b7"
HIGHLIGHT_COLOR = "#ff3366"
LABEL_COLOR = "#666"
DIMMED_EDGE_OPACITY = 0.1

# Node styling
DIMMED_NODE_OPACITY = 0.15
DIMMED_NODE_GRAYSCALE = 0.8


@dataclass(frozen=True)
class RenderNode:
    """A table as the drawing surface sees it."""

    id: str
    x: float
    y: float
    width: float
    height: float
    columns: tuple[Column, ...]
    header_color: str
    highlighted_columns: frozenset[str]
    columns_with_relations: frozenset[str]
    opacity: float
    grayscale: float
    note: str | None = None


@dataclass(frozen=True)
class RenderEdge:
    """A relationship edge as the drawing surface sees it."""

    id: str
    source_table: str
    target_table: str
    source_column: str
    target_column: str
    source_anchor: str
    target_anchor: str
    source_side: AnchorSide
    target_side: AnchorSide
    label: str
    stroke_width: float
    color: str
    label_color: str
    opacity: float
    animated: bool


def render_nodes(
    tables: Iterable[Table],
    positions: Mapping[str, LayoutNode],
    adjacency: AdjacencyIndex,
    highlight: Highlight,
) -> list[RenderNode]:
    """Style every placed table for the current highlight."""
    nodes: list[RenderNode] = []
    for table in tables:
        position = positions.get(table.name)
        if position is None:
            continue
        related = highlight.is_related(table.name)
        nodes.append(
            RenderNode(
                id=table.name,
                x=position.x,
                y=position.y,
                width=position.width,
                height=position.height,
                columns=table.columns,
                header_color=table.header_color,
                highlighted_columns=highlight.columns_for(table.name),
                columns_with_relations=related_columns(adjacency, table.name),
                opacity=1.0 if related else DIMMED_NODE_OPACITY,
                grayscale=0.0 if related else DIMMED_NODE_GRAYSCALE,
                note=table.note,
            ),
        )
    return nodes


def render_edge(
    edge: DiagramEdge,
    positions: Mapping[str, LayoutNode],
    highlight: Highlight,
) -> RenderEdge:
    """Style one edge, choosing anchor sides from the current positions."""
    sides = anchor_sides(positions.get(edge.source), positions.get(edge.target))
    source_anchor, target_anchor = edge.handles(sides)
    highlighted = edge.id in highlight.edges
    return RenderEdge(
        id=edge.id,
        source_table=edge.source,
        target_table=edge.target,
        source_column=edge.source_column.column,
        target_column=edge.target_column.column,
        source_anchor=source_anchor,
        target_anchor=target_anchor,
        source_side=sides.source,
        target_side=sides.target,
        label=edge.cardinality.label,
        stroke_width=EDGE_WIDTH_HIGHLIGHTED if highlighted else EDGE_WIDTH,
        color=HIGHLIGHT_COLOR if highlighted else EDGE_COLOR,
        label_color=HIGHLIGHT_COLOR if highlighted else LABEL_COLOR,
        opacity=1.0 if highlight.idle or highlighted else DIMMED_EDGE_OPACITY,
        animated=highlighted,
    )


def render_edges(
    edges: Iterable[DiagramEdge],
    positions: Mapping[str, LayoutNode],
    highlight: Highlight,
) -> list[RenderEdge]:
    """Style every edge; edges to unplaced tables are left for the surface to drop."""
    return [render_edge(edge, positions, highlight) for edge in edges]


def json_default(obj: object) -> object:
    """Convert sets for JSON encoding."""
    if isinstance(obj, frozenset | set):
        return sorted(obj)
    msg = f"Object of type {type(obj)} is not JSON serializable"
    raise TypeError(msg)


def render_to_dict(nodes: Iterable[RenderNode], edges: Iterable[RenderEdge]) -> dict[str, Any]:
    """Plain mapping of the render model, ready for ``json.dumps``."""
    return {
        "nodes": [asdict(node) for node in nodes],
        "edges": [asdict(edge) for edge in edges],
    }
