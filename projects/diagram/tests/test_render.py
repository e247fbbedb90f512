"""Tests for styling nodes and edges."""

import json

import pytest

from dbml import build_adjacency, parse_dbml
from diagram import AnchorSide, highlight, render_edges, render_nodes, render_to_dict
from diagram.interaction import edges_from_relationships
from diagram.render import json_default
from layout import LayoutNode

SCHEMA = parse_dbml(
    """
    Table users [headercolor: #3498DB] {
      id int [pk]
      name varchar
    }
    Table posts {
      id int [pk]
      user_id int [ref: > users.id]
    }
    Table tags {
      name varchar
    }
    Ref: tags.name <> posts.id
    """,
)

POSITIONS = {
    "users": LayoutNode("users", 280, 130, x=0, y=0),
    "posts": LayoutNode("posts", 280, 130, x=400, y=0),
    "tags": LayoutNode("tags", 280, 90, x=800, y=300),
}

EDGES = edges_from_relationships(SCHEMA.relationships)
ADJACENCY = build_adjacency(SCHEMA.tables, SCHEMA.relationships)


def test_idle_edges() -> None:
    """Test idle edges use the base style and their cardinality label."""
    edges = render_edges(EDGES, POSITIONS, highlight(None, EDGES))

    assert [edge.label for edge in edges] == ["(n) -> (1)", "(n) -> (n)"]
    for edge in edges:
        assert edge.stroke_width == 2
        assert edge.color == "#b1b1b7"
        assert edge.label_color == "#666"
        assert edge.opacity == 1.0
        assert not edge.animated


def test_highlighted_and_dimmed_edges() -> None:
    """Test hovering a table emphasises its edges and fades the rest."""
    hovered, dimmed = render_edges(EDGES, POSITIONS, highlight("users", EDGES))

    assert hovered.stroke_width == 3
    assert hovered.color == hovered.label_color == "#ff3366"
    assert hovered.animated
    assert hovered.opacity == 1.0
    assert dimmed.opacity == pytest.approx(0.1)
    assert not dimmed.animated


def test_edge_anchors_follow_positions() -> None:
    """Test a source to the right of its target attaches on its left side."""
    edge = render_edges(EDGES, POSITIONS, highlight(None, EDGES))[0]

    assert edge.source_side is AnchorSide.LEFT
    assert edge.target_side is AnchorSide.RIGHT
    assert edge.source_anchor == "user_id-left-source"
    assert edge.target_anchor == "id-right-target"


def test_nodes_carry_position_and_columns() -> None:
    """Test nodes keep their rectangle, colour and related columns."""
    users = render_nodes(SCHEMA.tables, POSITIONS, ADJACENCY, highlight(None, EDGES))[0]

    assert (users.x, users.y, users.width, users.height) == (0, 0, 280, 130)
    assert users.header_color == "#3498DB"
    assert [column.name for column in users.columns] == ["id", "name"]
    assert users.columns_with_relations == frozenset({"id"})
    assert users.opacity == 1.0
    assert users.grayscale == 0.0


def test_nodes_dimmed_while_hovering_elsewhere() -> None:
    """Test unrelated tables fade and turn grey while related ones stay."""
    nodes = render_nodes(SCHEMA.tables, POSITIONS, ADJACENCY, highlight("users", EDGES))
    by_id = {node.id: node for node in nodes}

    assert by_id["users"].highlighted_columns == frozenset({"id"})
    assert by_id["posts"].highlighted_columns == frozenset({"user_id"})
    assert by_id["posts"].opacity == 1.0
    assert by_id["tags"].opacity == pytest.approx(0.15)
    assert by_id["tags"].grayscale == pytest.approx(0.8)
    assert by_id["tags"].highlighted_columns == frozenset()


def test_unplaced_tables_skipped() -> None:
    """Test tables without a position are not rendered."""
    nodes = render_nodes(SCHEMA.tables, {}, ADJACENCY, highlight(None, EDGES))

    assert nodes == []


def test_render_model_is_json_serializable() -> None:
    """Test the plain render model encodes to JSON."""
    model = render_to_dict(
        render_nodes(SCHEMA.tables, POSITIONS, ADJACENCY, highlight("posts", EDGES)),
        render_edges(EDGES, POSITIONS, highlight("posts", EDGES)),
    )

    decoded = json.loads(json.dumps(model, default=json_default))

    assert decoded["nodes"][1]["highlighted_columns"] == ["id", "user_id"]
    assert decoded["nodes"][0]["columns"][0] == {
        "name": "id",
        "type": "int",
        "is_primary": True,
        "note": None,
    }
    assert decoded["edges"][0]["source_side"] == "left"


def test_json_default_rejects_other_objects() -> None:
    """Test unknown objects still fail to encode."""
    with pytest.raises(TypeError):
        json_default(object())


def test_suffix_like_column_names_render_intact() -> None:
    """Test anchors and row highlights use the full column names."""
    schema = parse_dbml(
        'Table a {\n  "y-right" int\n}\n'
        'Table b {\n  "x-left" int [ref: > a."y-right"]\n}',
    )
    edges = edges_from_relationships(schema.relationships)
    positions = {
        "a": LayoutNode("a", 280, 90, x=0, y=0),
        "b": LayoutNode("b", 280, 90, x=400, y=0),
    }
    adjacency = build_adjacency(schema.tables, schema.relationships)
    hovered = highlight("a", edges)

    (edge,) = render_edges(edges, positions, hovered)
    nodes = {node.id: node for node in render_nodes(schema.tables, positions, adjacency, hovered)}

    assert (edge.source_column, edge.target_column) == ("x-left", "y-right")
    assert (edge.source_anchor, edge.target_anchor) == (
        "x-left-left-source",
        "y-right-right-target",
    )
    assert nodes["a"].highlighted_columns == nodes["a"].columns_with_relations
    assert nodes["b"].highlighted_columns == frozenset({"x-left"})
