"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from offside import resolve
from offside.config import HASKELL_LAYOUT, LayoutConfig
from offside.debug import render_braces
from offside.layout import LayoutToken, LineTable, materialize
from offside.lexer import TokenSource, tokenize
from offside.tokens import Token, TokenType

START = TokenType.VIRTUAL_LEFT_BRACE
SEP = TokenType.VIRTUAL_SEMICOLON
END = TokenType.VIRTUAL_RIGHT_BRACE


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns raw tokens (excluding EOF)."""

    def _lex(source: str) -> list[Token]:
        tokens = tokenize(source)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def layout():
    """Return a helper that resolves source and returns the layout tokens."""

    def _layout(source: str, config: LayoutConfig = HASKELL_LAYOUT) -> list[LayoutToken]:
        return resolve(source, config=config)

    return _layout


def materialized(source: str) -> tuple[list[LayoutToken], LineTable]:
    """Materialize source through a fresh TokenSource."""
    src = TokenSource()
    src.start(source)
    return materialize(src)


def braces(source: str, config: LayoutConfig = HASKELL_LAYOUT) -> str:
    """Resolve source and render it with virtual tokens spelled as { ; }."""
    return render_braces(resolve(source, config=config), source)


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the raw token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def code_kinds(tokens: list[LayoutToken]) -> list[TokenType | None]:
    """Kinds of code and virtual tokens, with None for EOF."""
    return [t.kind for t in tokens if t.is_code or t.is_eof]


def virtual_kinds(tokens: list[LayoutToken]) -> list[TokenType]:
    """Kinds of the virtual tokens, in order."""
    return [t.kind for t in tokens if t.virtual]


def count(tokens: list[LayoutToken], kind: TokenType) -> int:
    return sum(1 for t in tokens if t.kind == kind)
