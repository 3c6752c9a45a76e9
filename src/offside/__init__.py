"""Offside-rule layout resolution for indentation-sensitive token streams."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from offside.config import LayoutConfig
    from offside.layout import LayoutToken

__version__ = "0.1.0"


def resolve(
    source: str,
    filename: str = "input.hs",
    config: LayoutConfig | None = None,
) -> list[LayoutToken]:
    """Tokenize source text and return its layout-resolved token stream."""
    from offside.config import HASKELL_LAYOUT
    from offside.layout_lexer import LayoutLexer
    from offside.lexer import TokenSource

    lexer = LayoutLexer(TokenSource(filename), config or HASKELL_LAYOUT)
    lexer.start(source)
    return list(lexer)
