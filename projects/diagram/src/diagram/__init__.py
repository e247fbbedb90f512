"""Interactive ER diagram model: highlighting, placement and export."""

from diagram.html_export import diagram_to_html
from diagram.interaction import (
    IDLE,
    AnchorSide,
    AnchorSides,
    DiagramEdge,
    HandleRole,
    Highlight,
    HoverState,
    anchor_sides,
    edges_from_relationships,
    handle_id,
    highlight,
)
from diagram.placement import GRID_SIZE, snap_to_grid
from diagram.reflection import read_only_sqlite, sqlite_to_schema
from diagram.render import RenderEdge, RenderNode, render_edges, render_nodes, render_to_dict
from diagram.state import DiagramState

__all__ = [
    "GRID_SIZE",
    "IDLE",
    "AnchorSide",
    "AnchorSides",
    "DiagramEdge",
    "DiagramState",
    "HandleRole",
    "Highlight",
    "HoverState",
    "RenderEdge",
    "RenderNode",
    "anchor_sides",
    "diagram_to_html",
    "edges_from_relationships",
    "handle_id",
    "highlight",
    "read_only_sqlite",
    "render_edges",
    "render_nodes",
    "render_to_dict",
    "snap_to_grid",
    "sqlite_to_schema",
]
