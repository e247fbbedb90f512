"""Tests for the DBML subset parser."""

from textwrap import dedent

import pytest

from dbml import Cardinality, Column, Diagnostic, Relationship, Schema, parse_dbml

BLOG_SCHEMA = dedent(
    """
    Table users {
      id int [pk]
    }
    Table posts {
      id int [pk]
      user_id int [ref: > users.id]
    }
    """,
)


@pytest.fixture(name="blog")
def blog_schema() -> Schema:
    """Parse the two-table blog schema."""
    return parse_dbml(BLOG_SCHEMA)


def test_tables_in_declaration_order(blog: Schema) -> None:
    """Test one table per declaration, in order."""
    assert [table.name for table in blog.tables] == ["users", "posts"]


def test_columns_in_declaration_order(blog: Schema) -> None:
    """Test columns keep their order and primary key flags."""
    posts = blog.table("posts")
    assert posts is not None
    assert posts.columns == (
        Column("id", "int", is_primary=True),
        Column("user_id", "int", is_primary=False),
    )


def test_inline_reference_emits_relationship(blog: Schema) -> None:
    """Test an inline ref becomes a relationship from the current column."""
    assert blog.relationships == (
        Relationship("posts", "user_id", "users", "id", Cardinality.ONE_TO_MANY),
    )


def test_single_line_blocks() -> None:
    """Test tables and columns declared on one line."""
    schema = parse_dbml(
        "Table users { id int [pk] } "
        "Table posts { id int [pk] user_id int [ref: > users.id] }",
    )

    assert [table.name for table in schema.tables] == ["users", "posts"]
    posts = schema.table("posts")
    assert posts is not None
    assert [column.name for column in posts.columns] == ["id", "user_id"]
    assert schema.relationships == (
        Relationship("posts", "user_id", "users", "id", Cardinality.ONE_TO_MANY),
    )


@pytest.mark.parametrize(
    ("symbol", "cardinality", "label"),
    [
        (">", Cardinality.ONE_TO_MANY, "(n) -> (1)"),
        ("<", Cardinality.MANY_TO_ONE, "(1) -> (n)"),
        ("<>", Cardinality.MANY_TO_MANY, "(n) -> (n)"),
        ("-", Cardinality.ONE_TO_ONE, "(1) -> (1)"),
    ],
)
def test_cardinality_symbols(symbol: str, cardinality: Cardinality, label: str) -> None:
    """Test every relation symbol maps to its cardinality and label."""
    schema = parse_dbml(f"Ref: a.x {symbol} b.y")

    assert len(schema.relationships) == 1
    assert schema.relationships[0].cardinality is cardinality
    assert schema.relationships[0].cardinality.label == label


def test_inline_reference_symbols() -> None:
    """Test inline refs accept all symbols, including a missing one."""
    schema = parse_dbml(
        dedent(
            """
            Table t {
              a int [ref: < other.id]
              b int [ref: <> other.id]
              c int [ref: other.id]
            }
            """,
        ),
    )

    assert [rel.cardinality for rel in schema.relationships] == [
        Cardinality.MANY_TO_ONE,
        Cardinality.MANY_TO_MANY,
        Cardinality.ONE_TO_ONE,
    ]


def test_several_references_on_one_column() -> None:
    """Test each ref setting of a column emits its own relationship."""
    schema = parse_dbml(
        "Table t {\n  owner_id int [ref: > users.id, ref: - owners.id]\n}",
    )

    assert [str(rel.target) for rel in schema.relationships] == ["users.id", "owners.id"]


def test_standalone_reference_with_name() -> None:
    """Test named Ref statements."""
    schema = parse_dbml("Ref fk_posts_user: posts.user_id > users.id")

    assert schema.relationships == (
        Relationship("posts", "user_id", "users", "id", Cardinality.ONE_TO_MANY),
    )


def test_reference_block() -> None:
    """Test relationships declared inside a Ref block."""
    schema = parse_dbml(
        dedent(
            """
            Ref {
              posts.user_id > users.id
              comments.post_id < posts.id
            }
            """,
        ),
    )

    assert [(str(r.source), r.cardinality, str(r.target)) for r in schema.relationships] == [
        ("posts.user_id", Cardinality.ONE_TO_MANY, "users.id"),
        ("comments.post_id", Cardinality.MANY_TO_ONE, "posts.id"),
    ]


def test_primary_key_requires_token() -> None:
    """Test pk must be its own setting, not part of another word or note."""
    schema = parse_dbml(
        dedent(
            """
            Table t {
              pkg_id int [not null]
              code varchar [note: 'the pk of the legacy table']
              id int [primary key]
              other int [pk, increment]
            }
            """,
        ),
    )

    table = schema.table("t")
    assert table is not None
    assert [column.is_primary for column in table.columns] == [False, False, True, True]


def test_column_notes_accept_both_quote_styles() -> None:
    """Test notes in double and single quotes."""
    schema = parse_dbml(
        dedent(
            """
            Table users {
              email varchar [note: "Primary contact"]
              name varchar [not null, note: 'Display name, shown publicly']
              age int
            }
            """,
        ),
    )

    table = schema.table("users")
    assert table is not None
    assert [column.note for column in table.columns] == [
        "Primary contact",
        "Display name, shown publicly",
        None,
    ]


def test_header_color_and_default() -> None:
    """Test headercolor setting and the default colour."""
    schema = parse_dbml(
        "Table users [headercolor: #3498DB] {\n  id int\n}\nTable posts {\n  id int\n}",
    )

    assert [table.header_color for table in schema.tables] == ["#3498DB", "#ff7225"]


def test_table_notes() -> None:
    """Test table notes from settings and from a Note statement."""
    schema = parse_dbml(
        dedent(
            """
            Table users [note: 'People'] {
              id int
            }
            Table posts {
              id int
              Note: 'Blog entries'
            }
            """,
        ),
    )

    assert [table.note for table in schema.tables] == ["People", "Blog entries"]


def test_types_with_arguments_and_quotes() -> None:
    """Test parenthesised and quoted column types."""
    schema = parse_dbml(
        dedent(
            """
            Table products {
              price decimal(10,2)
              name varchar(255) [not null]
              created "timestamp with time zone"
            }
            """,
        ),
    )

    table = schema.table("products")
    assert table is not None
    assert [column.type for column in table.columns] == [
        "decimal(10,2)",
        "varchar(255)",
        "timestamp with time zone",
    ]


def test_quoted_names() -> None:
    """Test double-quoted table and column names."""
    schema = parse_dbml('Table "user accounts" {\n  "display name" varchar\n}')

    table = schema.table("user accounts")
    assert table is not None
    assert table.columns[0].name == "display name"


def test_column_before_any_table_is_ignored() -> None:
    """Test columns outside a table produce nothing."""
    diagnostics: list[Diagnostic] = []
    schema = parse_dbml("id int [pk]\nTable users {\n  id int\n}", diagnostics=diagnostics)

    table = schema.table("users")
    assert table is not None
    assert len(table.columns) == 1
    assert diagnostics == [Diagnostic(1, "column outside of a table")]


def test_column_after_closing_brace_joins_last_table() -> None:
    """Test the table cursor stays on the last declared table."""
    schema = parse_dbml("Table users {\n  id int\n}\nname varchar\n")

    table = schema.table("users")
    assert table is not None
    assert [column.name for column in table.columns] == ["id", "name"]


def test_unsupported_blocks_are_skipped() -> None:
    """Test enum and project blocks contribute no columns."""
    schema = parse_dbml(
        dedent(
            """
            Project blog {
              database_type: 'PostgreSQL'
            }
            Table users {
              id int [pk]
              status user_status
            }
            Enum user_status {
              active [note: 'Can sign in']
              banned
            }
            """,
        ),
    )

    assert [table.name for table in schema.tables] == ["users"]
    table = schema.table("users")
    assert table is not None
    assert [column.name for column in table.columns] == ["id", "status"]


def test_unparsable_lines_are_silently_skipped() -> None:
    """Test garbage lines do not fail parsing or produce output."""
    schema = parse_dbml("!!! ???\nTable users {\n  id int\n  ###\n}\n: : :")

    assert [table.name for table in schema.tables] == ["users"]
    assert schema.relationships == ()


def test_comments_are_ignored() -> None:
    """Test line comments are dropped."""
    schema = parse_dbml("// schema\nTable users { // people\n  id int [pk] // key\n}")

    table = schema.table("users")
    assert table is not None
    assert table.columns == (Column("id", "int", is_primary=True),)


def test_duplicate_table_last_wins() -> None:
    """Test a repeated table name replaces the earlier declaration."""
    diagnostics: list[Diagnostic] = []
    schema = parse_dbml(
        "Table a {\n  x int\n}\nTable b {\n  y int\n}\nTable a {\n  z int\n}",
        diagnostics=diagnostics,
    )

    assert [table.name for table in schema.tables] == ["b", "a"]
    table = schema.table("a")
    assert table is not None
    assert [column.name for column in table.columns] == ["z"]
    assert [d.message for d in diagnostics] == [
        "duplicate table 'a' replaces earlier declaration",
    ]


def test_dangling_references_are_preserved() -> None:
    """Test references to undeclared tables are kept verbatim."""
    schema = parse_dbml("Table posts {\n  author_id int [ref: > authors.id]\n}")

    assert schema.relationships == (
        Relationship("posts", "author_id", "authors", "id", Cardinality.ONE_TO_MANY),
    )


def test_parse_is_idempotent() -> None:
    """Test parsing the same text twice gives equal results."""
    assert parse_dbml(BLOG_SCHEMA) == parse_dbml(BLOG_SCHEMA)


def test_empty_input() -> None:
    """Test empty text gives an empty schema."""
    assert parse_dbml("") == Schema(tables=(), relationships=())
