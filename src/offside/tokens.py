"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Keywords
    KW_MODULE = auto()
    KW_WHERE = auto()
    KW_LET = auto()
    KW_IN = auto()
    KW_DO = auto()
    KW_OF = auto()
    KW_CASE = auto()
    KW_IF = auto()
    KW_THEN = auto()
    KW_ELSE = auto()
    KW_IMPORT = auto()
    KW_DATA = auto()
    KW_TYPE = auto()
    KW_CLASS = auto()
    KW_INSTANCE = auto()
    KW_DERIVING = auto()
    KW_NEWTYPE = auto()

    # Identifiers and literals
    VARID = auto()  # x, foldr', _unused
    CONID = auto()  # Maybe, Just
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()
    CHAR = auto()

    # Punctuation
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    COMMA = auto()  # ,
    SEMICOLON = auto()  # ;
    BACKQUOTE = auto()  # `
    EQUALS = auto()  # = on its own
    OPERATOR = auto()  # any other run of symbol characters

    # Non-code
    WS = auto()  # horizontal whitespace (spaces/tabs)
    NEWLINE = auto()  # \n or \r\n
    LINE_COMMENT = auto()  # -- to end of line
    BLOCK_COMMENT = auto()  # {- ... -}, nestable

    # Virtual layout delimiters, zero width
    VIRTUAL_LEFT_BRACE = auto()
    VIRTUAL_SEMICOLON = auto()
    VIRTUAL_RIGHT_BRACE = auto()

    EOF = auto()


KEYWORDS: dict[str, TokenType] = {
    "module": TokenType.KW_MODULE,
    "where": TokenType.KW_WHERE,
    "let": TokenType.KW_LET,
    "in": TokenType.KW_IN,
    "do": TokenType.KW_DO,
    "of": TokenType.KW_OF,
    "case": TokenType.KW_CASE,
    "if": TokenType.KW_IF,
    "then": TokenType.KW_THEN,
    "else": TokenType.KW_ELSE,
    "import": TokenType.KW_IMPORT,
    "data": TokenType.KW_DATA,
    "type": TokenType.KW_TYPE,
    "class": TokenType.KW_CLASS,
    "instance": TokenType.KW_INSTANCE,
    "deriving": TokenType.KW_DERIVING,
    "newtype": TokenType.KW_NEWTYPE,
}

PUNCTUATION: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "`": TokenType.BACKQUOTE,
}

VIRTUAL_TYPES = frozenset(
    {
        TokenType.VIRTUAL_LEFT_BRACE,
        TokenType.VIRTUAL_SEMICOLON,
        TokenType.VIRTUAL_RIGHT_BRACE,
    }
)


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single raw lexer token and the source text it covers."""

    type: TokenType
    value: str
    span: Span


_SYMBOL_CHARS = frozenset("!#$%&*+./<=>?@\\^|-~:")


def is_symbol_char(ch: str) -> bool:
    """Return True if ch can appear in an operator."""
    return ch in _SYMBOL_CHARS


def is_ident_start(ch: str) -> bool:
    """Return True if ch can start an identifier."""
    return ch.isalpha() or ch == "_"


def is_ident_char(ch: str) -> bool:
    """Return True if ch can continue an identifier (letters, digits, _ and ')."""
    return ch.isalnum() or ch in "_'"
