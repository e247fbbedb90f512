"""Recursive descent parser for the DBML subset used by the diagram.

The parser is permissive: statements it does not understand are skipped,
references to undeclared tables are kept verbatim, and a repeated table name
replaces the earlier declaration. Problems are only reported when the caller
passes a ``diagnostics`` list.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from logging import getLogger

from dbml.tokenizer import Token, TokenKind, tokenize, unquote
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

logger = getLogger(__name__)

_TERMINATORS = {TokenKind.NEWLINE, TokenKind.LBRACE, TokenKind.RBRACE}
_NAME_KINDS = (TokenKind.NAME, TokenKind.STRING)


@dataclass
class _Statement:
    """Tokens between two terminators, plus the terminator that ended them."""

    tokens: list[Token]
    terminator: TokenKind | None

    @property
    def line(self) -> int:
        return self.tokens[0].line if self.tokens else 0

    def source(self, text: str) -> str:
        if not self.tokens:
            return ""
        return text[self.tokens[0].start : self.tokens[-1].end]


@dataclass
class _TableBuilder:
    name: str
    header_color: str = DEFAULT_HEADER_COLOR
    note: str | None = None
    columns: dict[str, Column] = field(default_factory=dict)

    def build(self) -> Table:
        return Table(
            name=self.name,
            columns=tuple(self.columns.values()),
            header_color=self.header_color,
            note=self.note,
        )


@dataclass
class _ParseState:
    """Everything the parser mutates while walking one input text."""

    text: str
    tables: dict[str, _TableBuilder] = field(default_factory=dict)
    relationships: list[Relationship] = field(default_factory=list)
    current_table: _TableBuilder | None = None
    depth: int = 0
    table_depth: int | None = None
    ref_depth: int | None = None
    skip_depth: int | None = None
    diagnostics: list[Diagnostic] | None = None

    def report(self, statement: _Statement, message: str) -> None:
        source = statement.source(self.text)
        logger.debug("Line %d skipped (%s): %s", statement.line, message, source)
        if self.diagnostics is not None:
            self.diagnostics.append(Diagnostic(statement.line, message, source))


class _Cursor:
    """Read position over the tokens of a single statement."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self._tokens = tokens
        self._index = 0

    def peek(self, offset: int = 0) -> Token | None:
        index = self._index + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def at_end(self) -> bool:
        return self._index >= len(self._tokens)

    def advance(self) -> Token:
        token = self._tokens[self._index]
        self._index += 1
        return token

    def accept(self, *kinds: TokenKind, value: str | None = None) -> Token | None:
        token = self.peek()
        if token is None or token.kind not in kinds:
            return None
        if value is not None and token.value.lower() != value:
            return None
        self._index += 1
        return token


def _split_statements(tokens: Iterator[Token]) -> Iterator[_Statement]:
    """Group tokens into statements ending at a newline or a brace."""
    pending: list[Token] = []
    for token in tokens:
        if token.kind in _TERMINATORS:
            yield _Statement(pending, token.kind)
            pending = []
        else:
            pending.append(token)
    yield _Statement(pending, None)


def _is_keyword(token: Token | None, keyword: str) -> bool:
    return token is not None and token.kind is TokenKind.NAME and token.value == keyword


def _parse_name(cursor: _Cursor) -> str | None:
    """Parse a possibly quoted, possibly dotted identifier."""
    token = cursor.accept(*_NAME_KINDS)
    if token is None:
        return None
    parts = [unquote(token.value)]
    while (dot := cursor.peek()) is not None and dot.kind is TokenKind.DOT:
        following = cursor.peek(1)
        if following is None or following.kind not in _NAME_KINDS:
            break
        cursor.advance()
        parts.append(unquote(cursor.advance().value))
    return ".".join(parts)


def _parse_endpoint(cursor: _Cursor) -> ColumnRef | None:
    """Parse ``table.column``; everything before the last dot is the table."""
    name = _parse_name(cursor)
    if name is None or "." not in name:
        return None
    table, _, column = name.rpartition(".")
    return ColumnRef(table, column)


def _parse_symbol(cursor: _Cursor) -> str | None:
    token = cursor.accept(TokenKind.RELATION)
    return token.value if token else None


def _split_settings(cursor: _Cursor) -> list[list[Token]]:
    """Read a bracketed settings list into comma separated items."""
    if cursor.accept(TokenKind.LBRACKET) is None:
        return []
    items: list[list[Token]] = [[]]
    nesting = 0
    while not cursor.at_end():
        token = cursor.advance()
        if token.kind is TokenKind.RBRACKET and nesting == 0:
            break
        if token.kind in {TokenKind.LPAREN, TokenKind.LBRACKET}:
            nesting += 1
        elif token.kind in {TokenKind.RPAREN, TokenKind.RBRACKET}:
            nesting -= 1
        elif token.kind is TokenKind.COMMA and nesting == 0:
            items.append([])
            continue
        items[-1].append(token)
    return [item for item in items if item]


def _setting_value(text: str, tokens: Sequence[Token]) -> str:
    """Raw source text of a setting value, unquoted when it is a single string."""
    if len(tokens) == 1 and tokens[0].kind is TokenKind.STRING:
        return unquote(tokens[0].value)
    return text[tokens[0].start : tokens[-1].end].strip() if tokens else ""


def _setting(item: list[Token]) -> tuple[str, list[Token]]:
    """Split a settings item into a lower-cased key and its value tokens."""
    key_tokens: list[Token] = []
    for index, token in enumerate(item):
        if token.kind is TokenKind.COLON:
            return " ".join(t.value.lower() for t in key_tokens), item[index + 1 :]
        key_tokens.append(token)
    return " ".join(t.value.lower() for t in key_tokens), []


def _parse_table(state: _ParseState, cursor: _Cursor, statement: _Statement) -> None:
    """``Table <name> [as <alias>] [settings]``."""
    name = _parse_name(cursor)
    if name is None:
        state.report(statement, "table declaration without a name")
        return
    if cursor.accept(TokenKind.NAME, value="as"):
        _parse_name(cursor)

    builder = _TableBuilder(name)
    for item in _split_settings(cursor):
        key, value = _setting(item)
        if key == "headercolor" and value:
            builder.header_color = _setting_value(state.text, value)
        elif key == "note" and value:
            builder.note = _setting_value(state.text, value)

    if name in state.tables:
        state.report(statement, f"duplicate table '{name}' replaces earlier declaration")
        del state.tables[name]
    state.tables[name] = builder
    state.current_table = builder


def _add_relationship(
    state: _ParseState,
    source: ColumnRef,
    symbol: str | None,
    target: ColumnRef,
) -> None:
    state.relationships.append(
        Relationship(
            from_table=source.table,
            from_column=source.column,
            to_table=target.table,
            to_column=target.column,
            cardinality=Cardinality.from_symbol(symbol),
        ),
    )


def _parse_relation(state: _ParseState, cursor: _Cursor, statement: _Statement) -> None:
    """``<table>.<column> <symbol> <table>.<column>``."""
    source = _parse_endpoint(cursor)
    symbol = _parse_symbol(cursor)
    target = _parse_endpoint(cursor)
    if source is None or target is None:
        state.report(statement, "malformed relationship")
        return
    _add_relationship(state, source, symbol, target)


def _parse_ref(state: _ParseState, cursor: _Cursor, statement: _Statement) -> bool:
    """``Ref [name]: a.b > c.d`` or ``Ref [name] {``; True when a block opens."""
    if (token := cursor.peek()) is not None and token.kind is not TokenKind.COLON:
        _parse_name(cursor)
    if cursor.accept(TokenKind.COLON):
        _parse_relation(state, cursor, statement)
        return False
    if statement.terminator is TokenKind.LBRACE and cursor.at_end():
        return True
    state.report(statement, "malformed relationship")
    return False


def _parse_column(state: _ParseState, cursor: _Cursor, statement: _Statement) -> bool:
    """``<name> <type> [settings]``; False when the statement is not a column."""
    name_token = cursor.accept(*_NAME_KINDS)
    type_token = cursor.accept(*_NAME_KINDS)
    if name_token is None or type_token is None:
        return False

    type_end = type_token.end
    if cursor.accept(TokenKind.LPAREN):
        while (token := cursor.peek()) is not None:
            cursor.advance()
            if token.kind is TokenKind.RPAREN:
                type_end = token.end
                break
    column_type = (
        unquote(type_token.value)
        if type_token.kind is TokenKind.STRING
        else state.text[type_token.start : type_end]
    )

    table = state.current_table
    if table is None:
        state.report(statement, "column outside of a table")
        return True

    column_name = unquote(name_token.value)
    is_primary = False
    note = None
    for item in _split_settings(cursor):
        key, value = _setting(item)
        if key in {"pk", "primary key"}:
            is_primary = True
        elif key == "note" and value:
            note = _setting_value(state.text, value)
        elif key == "ref":
            ref_cursor = _Cursor(value)
            symbol = _parse_symbol(ref_cursor)
            target = _parse_endpoint(ref_cursor)
            if target is None:
                state.report(statement, "malformed column reference")
                continue
            _add_relationship(state, ColumnRef(table.name, column_name), symbol, target)

    table.columns.pop(column_name, None)
    table.columns[column_name] = Column(column_name, column_type, is_primary, note)
    return True


def _parse_columns(state: _ParseState, cursor: _Cursor, statement: _Statement) -> bool:
    """One or more columns; several may share a line in single-line blocks."""
    if not _parse_column(state, cursor, statement):
        return False
    while (first := cursor.peek()) is not None and first.kind in _NAME_KINDS:
        second = cursor.peek(1)
        if second is None or second.kind not in _NAME_KINDS:
            state.report(statement, "trailing text after column")
            break
        _parse_column(state, cursor, statement)
    return True


def _parse_statement(state: _ParseState, statement: _Statement) -> None:
    """Dispatch one statement and update block bookkeeping."""
    opens_block = statement.terminator is TokenKind.LBRACE
    cursor = _Cursor(statement.tokens)
    first = cursor.peek()

    if state.skip_depth is not None or first is None:
        pass
    elif _is_keyword(first, "Table") and cursor.peek(1) is not None:
        cursor.advance()
        _parse_table(state, cursor, statement)
        if opens_block:
            state.table_depth = state.depth + 1
    elif _is_keyword(first, "Ref"):
        cursor.advance()
        if _parse_ref(state, cursor, statement):
            state.ref_depth = state.depth + 1
    elif state.ref_depth is not None and state.depth >= state.ref_depth:
        _parse_relation(state, cursor, statement)
    elif opens_block:
        state.report(statement, "unsupported block skipped")
        state.skip_depth = state.depth + 1
    elif (
        _is_keyword(first, "Note")
        and state.current_table is not None
        and state.table_depth is not None
        and (note := _parse_table_note(cursor)) is not None
    ):
        state.current_table.note = note
    elif not _parse_columns(state, _Cursor(statement.tokens), statement):
        state.report(statement, "unrecognised statement")

    if opens_block:
        state.depth += 1
    elif statement.terminator is TokenKind.RBRACE:
        _close_block(state)


def _parse_table_note(cursor: _Cursor) -> str | None:
    """``Note: '<text>'`` inside a table block."""
    cursor.advance()
    if cursor.accept(TokenKind.COLON) is None:
        return None
    token = cursor.accept(TokenKind.STRING)
    return unquote(token.value) if token else None


def _close_block(state: _ParseState) -> None:
    if state.skip_depth == state.depth:
        state.skip_depth = None
    if state.ref_depth == state.depth:
        state.ref_depth = None
    if state.table_depth == state.depth:
        state.table_depth = None
    state.depth = max(state.depth - 1, 0)


def parse_dbml(text: str, *, diagnostics: list[Diagnostic] | None = None) -> Schema:
    """Parse schema text into tables and relationships.

    Args:
        text: DBML source text
        diagnostics: Optional list that receives a ``Diagnostic`` for every
            skipped statement and every duplicate table

    Returns:
        Tables and relationships in declaration order

    """
    state = _ParseState(text=text, diagnostics=diagnostics)
    for statement in _split_statements(tokenize(text)):
        _parse_statement(state, statement)

    schema = Schema(
        tables=tuple(builder.build() for builder in state.tables.values()),
        relationships=tuple(state.relationships),
    )
    logger.debug(
        "Parsed %d tables and %d relationships",
        len(schema.tables),
        len(schema.relationships),
    )
    return schema
