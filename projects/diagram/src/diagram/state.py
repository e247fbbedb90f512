"""Live diagram state for one model generation at a time."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger

from dbml import AdjacencyIndex, Diagnostic, Schema, build_adjacency, parse_dbml
from diagram.interaction import DiagramEdge, Highlight, HoverState, edges_from_relationships
from diagram.placement import GRID_SIZE, check_grid_size, snap_to_grid
from diagram.render import RenderEdge, RenderNode, render_edges, render_nodes
from layout import LayoutConfig, LayoutNode, layout_tables

logger = getLogger(__name__)


class DiagramState:
    """Owns the parsed model, table positions and hover state.

    Loading new text replaces everything, including manual moves. Pointer
    events only touch positions and highlights; they never re-parse or re-run
    the layout.
    """

    def __init__(
        self,
        config: LayoutConfig | None = None,
        *,
        grid_size: float = GRID_SIZE,
    ) -> None:
        """Create an empty diagram."""
        check_grid_size(grid_size)
        self.config = config or LayoutConfig()
        self.grid_size = grid_size
        self.schema = Schema(tables=(), relationships=())
        self.adjacency: AdjacencyIndex = {}
        self.diagram_edges: list[DiagramEdge] = []
        self.diagnostics: list[Diagnostic] = []
        self._positions: dict[str, LayoutNode] = {}
        self._hover = HoverState()

    def load(self, text: str) -> Schema:
        """Parse text and lay out the resulting schema."""
        diagnostics: list[Diagnostic] = []
        schema = parse_dbml(text, diagnostics=diagnostics)
        self.load_schema(schema)
        self.diagnostics = diagnostics
        return schema

    def load_schema(self, schema: Schema) -> None:
        """Start a new model generation from an already built schema."""
        self.schema = schema
        self.diagnostics = []
        self.adjacency = build_adjacency(schema.tables, schema.relationships)
        self.diagram_edges = edges_from_relationships(schema.relationships)
        self._positions = layout_tables(schema.tables, schema.relationships, self.config)
        self._hover.reset(self.diagram_edges)
        logger.debug("Loaded %d tables, %d edges", len(schema.tables), len(self.diagram_edges))

    @property
    def positions(self) -> dict[str, LayoutNode]:
        """Copy of the current table rectangles."""
        return {name: replace(node) for name, node in self._positions.items()}

    def position(self, node_id: str) -> LayoutNode:
        """Current rectangle of one table."""
        try:
            return replace(self._positions[node_id])
        except KeyError as err:
            msg = f"Unknown table '{node_id}'"
            raise KeyError(msg) from err

    def move(self, node_id: str, x: float, y: float) -> tuple[float, float]:
        """Place a table exactly at ``(x, y)``."""
        try:
            node = self._positions[node_id]
        except KeyError as err:
            msg = f"Unknown table '{node_id}'"
            raise KeyError(msg) from err
        node.x = x
        node.y = y
        return x, y

    def drop(self, node_id: str, x: float, y: float) -> tuple[float, float]:
        """Place a dragged table at the grid point nearest the drop position."""
        return self.move(node_id, *snap_to_grid(x, y, self.grid_size))

    @property
    def hovered(self) -> str | None:
        """Currently hovered table."""
        return self._hover.hovered

    @property
    def highlight(self) -> Highlight:
        """Highlight sets of the current hover state."""
        return self._hover.highlight

    def hover(self, node_id: str | None) -> Highlight:
        """Pointer entered ``node_id``, or left when it is None."""
        if node_id is None:
            return self._hover.leave()
        return self._hover.enter(node_id)

    def nodes(self) -> list[RenderNode]:
        """Renderable tables for the current positions and highlight."""
        return render_nodes(
            self.schema.tables,
            self._positions,
            self.adjacency,
            self._hover.highlight,
        )

    def edges(self) -> list[RenderEdge]:
        """Renderable edges with anchor sides from the current positions."""
        return render_edges(self.diagram_edges, self._positions, self._hover.highlight)
