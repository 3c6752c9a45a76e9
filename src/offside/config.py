"""Layout configuration: which token kinds open blocks, which are not code."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from offside.errors import ConfigError
from offside.tokens import KEYWORDS, TokenType


@dataclass(frozen=True, slots=True)
class LetIn:
    """The keyword pair whose same-line occurrence closes a block at once."""

    let: TokenType
    in_: TokenType


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Token kinds the layout resolver is parameterized over.

    ``close_top_level`` controls whether the implicit top-level block is
    closed by a virtual end token at EOF. With it off the top-level
    sentinel is popped silently and every virtual start has a matching end.
    """

    end_of_line: TokenType
    layout_start: TokenType
    layout_separator: TokenType
    layout_end: TokenType
    non_code: frozenset[TokenType]
    layout_creating: frozenset[TokenType]
    let_in: LetIn
    close_top_level: bool = True

    def with_keywords(self, names: Iterable[str]) -> LayoutConfig:
        """Return a copy whose layout-creating set is exactly the named keywords."""
        kinds: set[TokenType] = set()
        for name in names:
            tt = KEYWORDS.get(name)
            if tt is None:
                raise ConfigError(f"unknown layout keyword {name!r}")
            kinds.add(tt)
        return replace(self, layout_creating=frozenset(kinds))

    def with_close_top_level(self, value: bool) -> LayoutConfig:
        return replace(self, close_top_level=value)


DEFAULT_LAYOUT_KEYWORDS = ("where", "let", "do", "of")

HASKELL_LAYOUT = LayoutConfig(
    end_of_line=TokenType.NEWLINE,
    layout_start=TokenType.VIRTUAL_LEFT_BRACE,
    layout_separator=TokenType.VIRTUAL_SEMICOLON,
    layout_end=TokenType.VIRTUAL_RIGHT_BRACE,
    non_code=frozenset(
        {
            TokenType.WS,
            TokenType.NEWLINE,
            TokenType.LINE_COMMENT,
            TokenType.BLOCK_COMMENT,
        }
    ),
    layout_creating=frozenset(KEYWORDS[name] for name in DEFAULT_LAYOUT_KEYWORDS),
    let_in=LetIn(TokenType.KW_LET, TokenType.KW_IN),
)
