"""Human- and machine-readable dumps of raw and resolved token streams."""

from __future__ import annotations

import json
import sys
from typing import TextIO

from offside.layout import LayoutToken
from offside.tokens import Token, TokenType

_BRACES = {
    TokenType.VIRTUAL_LEFT_BRACE: "{",
    TokenType.VIRTUAL_SEMICOLON: ";",
    TokenType.VIRTUAL_RIGHT_BRACE: "}",
}


def _kind_name(tok: LayoutToken) -> str:
    return tok.kind.name if tok.kind is not None else "EOF"


def dump_raw_tokens(tokens: list[Token], *, file: TextIO = sys.stderr) -> None:
    """Print one raw token per line to *file*."""
    for tok in tokens:
        start = tok.span.start
        file.write(f"{start.line}:{start.column} {tok.type.name} {tok.value!r}\n")


def format_tokens(tokens: list[LayoutToken]) -> str:
    """One resolved token per line: kind, offsets, column and line id."""
    rows = []
    for tok in tokens:
        marker = "*" if tok.virtual else " "
        rows.append(
            f"{marker}{_kind_name(tok):<20} {tok.start:>6} {tok.end:>6}"
            f"  col={tok.column} line={tok.line}"
        )
    return "\n".join(rows) + "\n"


def render_braces(tokens: list[LayoutToken], source: str) -> str:
    """Return *source* with the virtual tokens spelled as ``{``, ``;`` and ``}``."""
    parts: list[str] = []
    for tok in tokens:
        if tok.virtual and tok.kind in _BRACES:
            parts.append(_BRACES[tok.kind])
        else:
            parts.append(source[tok.start : tok.end])
    return "".join(parts)


def tokens_to_json(tokens: list[LayoutToken]) -> str:
    """Serialize resolved tokens as a JSON array of objects."""
    return json.dumps(
        [
            {
                "kind": _kind_name(tok),
                "start": tok.start,
                "end": tok.end,
                "column": tok.column,
                "line": tok.line,
                "virtual": tok.virtual,
            }
            for tok in tokens
        ],
        indent=2,
    )
