"""Standalone HTML export of a laid out diagram."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from diagram.interaction import AnchorSide
from diagram.render import RenderEdge, RenderNode

if TYPE_CHECKING:
    from diagram.state import DiagramState
    from layout import LayoutConfig

TEMPLATE_DIR = Path(__file__).parent / "templates"

# Horizontal reach of the bezier control points
CURVE_OFFSET = 80
# Blank space around the drawing
MARGIN = 40

_JINJA_ENV = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _row_center(node: RenderNode, column: str, config: LayoutConfig) -> float:
    """Vertical centre of a column row, or of the header for unknown columns."""
    for index, candidate in enumerate(node.columns):
        if candidate.name == column:
            return node.y + config.base_height + config.column_height * (index + 0.5)
    return node.y + config.base_height / 2


def anchor_point(
    node: RenderNode,
    column: str,
    side: AnchorSide,
    config: LayoutConfig,
) -> tuple[float, float]:
    """Point on the left or right border of a table next to ``column``."""
    x = node.x + node.width if side is AnchorSide.RIGHT else node.x
    return x, _row_center(node, column, config)


def edge_path(
    start: tuple[float, float],
    end: tuple[float, float],
    source_side: AnchorSide,
    target_side: AnchorSide,
) -> str:
    """SVG cubic bezier leaving and entering perpendicular to the borders."""
    (x1, y1), (x2, y2) = start, end
    c1 = x1 + (CURVE_OFFSET if source_side is AnchorSide.RIGHT else -CURVE_OFFSET)
    c2 = x2 + (CURVE_OFFSET if target_side is AnchorSide.RIGHT else -CURVE_OFFSET)
    return f"M {x1:.1f} {y1:.1f} C {c1:.1f} {y1:.1f}, {c2:.1f} {y2:.1f}, {x2:.1f} {y2:.1f}"


def _edge_view(
    edge: RenderEdge,
    nodes: dict[str, RenderNode],
    config: LayoutConfig,
) -> dict[str, Any] | None:
    source = nodes.get(edge.source_table)
    target = nodes.get(edge.target_table)
    if source is None or target is None:
        return None
    start = anchor_point(source, edge.source_column, edge.source_side, config)
    end = anchor_point(target, edge.target_column, edge.target_side, config)
    return {
        "edge": edge,
        "path": edge_path(start, end, edge.source_side, edge.target_side),
        "label_x": (start[0] + end[0]) / 2,
        "label_y": (start[1] + end[1]) / 2,
    }


def _node_view(node: RenderNode, config: LayoutConfig) -> dict[str, Any]:
    return {
        "node": node,
        "rows": [
            {
                "column": column,
                "y": node.y + config.base_height + config.column_height * index,
                "highlighted": column.name in node.highlighted_columns,
                "related": column.name in node.columns_with_relations,
            }
            for index, column in enumerate(node.columns)
        ],
    }


def _view_box(nodes: list[RenderNode]) -> tuple[float, float, float, float]:
    if not nodes:
        return 0, 0, 2 * MARGIN, 2 * MARGIN
    left = min(node.x for node in nodes) - MARGIN
    top = min(node.y for node in nodes) - MARGIN
    right = max(node.x + node.width for node in nodes) + MARGIN
    bottom = max(node.y + node.height for node in nodes) + MARGIN
    return left, top, right - left, bottom - top


def diagram_to_html(state: DiagramState, title: str = "ER Diagram") -> str:
    """Render the current diagram state as a self-contained HTML page."""
    nodes = state.nodes()
    by_id = {node.id: node for node in nodes}
    edges = [
        view
        for edge in state.edges()
        if (view := _edge_view(edge, by_id, state.config)) is not None
    ]
    template = _JINJA_ENV.get_template("diagram.html")
    return template.render(
        title=title,
        view_box=_view_box(nodes),
        nodes=[_node_view(node, state.config) for node in nodes],
        edges=edges,
        header_height=state.config.base_height,
        row_height=state.config.column_height,
        grid_size=state.grid_size,
    )
