"""Tokenizer for the DBML subset understood by the parser."""

from __future__ import annotations

import re
from collections.abc import Iterator
from enum import StrEnum, auto
from typing import NamedTuple


class TokenKind(StrEnum):
    """Kinds of lexical tokens."""

    NAME = auto()
    STRING = auto()
    COLOR = auto()
    RELATION = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    COLON = auto()
    DOT = auto()
    COMMA = auto()
    NEWLINE = auto()
    OTHER = auto()


class Token(NamedTuple):
    """A lexical token with its position in the source text."""

    kind: TokenKind
    value: str
    line: int
    start: int
    end: int


# Order matters: longer alternatives first.
_TOKEN_SPEC = [
    ("COMMENT", r"//[^\n]*"),
    ("STRING", r"'''.*?'''|\"(?:[^\"\\\n]|\\.)*\"|'(?:[^'\\\n]|\\.)*'"),
    ("COLOR", r"#[0-9A-Za-z]+"),
    ("NAME", r"\w+"),
    ("RELATION", r"<>|[<>-]"),
    ("LBRACKET", r"\["),
    ("RBRACKET", r"\]"),
    ("LBRACE", r"\{"),
    ("RBRACE", r"\}"),
    ("LPAREN", r"\("),
    ("RPAREN", r"\)"),
    ("COLON", r":"),
    ("DOT", r"\."),
    ("COMMA", r","),
    ("NEWLINE", r"\r?\n"),
    ("SKIP", r"[ \t\f\v]+"),
    ("OTHER", r"."),
]

_TOKEN_RE = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_SPEC),
    re.DOTALL,
)


def unquote(value: str) -> str:
    """Strip the surrounding quotes from a string token."""
    if value.startswith("'''") and value.endswith("'''") and len(value) >= 6:  # noqa: PLR2004
        return value[3:-3]
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":  # noqa: PLR2004
        return value[1:-1]
    return value


def tokenize(text: str) -> Iterator[Token]:
    """Split schema text into tokens, dropping whitespace and comments."""
    line = 1
    for match in _TOKEN_RE.finditer(text):
        kind = match.lastgroup
        value = match.group()
        if kind not in {"COMMENT", "SKIP"}:
            yield Token(TokenKind[kind], value, line, match.start(), match.end())
        line += value.count("\n")
