"""Error types with formatted source context."""

from __future__ import annotations

from pathlib import Path

from offside.tokens import Position


def _snippet(message: str, position: Position, source: str, filename: str) -> str:
    """Render a one-line source excerpt with a caret under *position*."""
    lines = source.splitlines()
    line_idx = position.line - 1
    col = position.column

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx]
    else:
        source_line = ""

    # At least one caret, at most two, never past the end of the line
    underline_len = max(1, min(2, len(source_line) - col + 1))

    line_num = str(position.line)
    gutter_width = len(line_num) + 1
    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{position.line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {' ' * (col - 1)}{'^' * underline_len}"
    )


class LexError(Exception):
    """Raised on the first raw lexing error, with position and source context."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.message = message
        self.position = position
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.hs") -> str:
        return _snippet(self.message, self.position, self.source, filename)


class IncrementalLexError(ValueError):
    """Raised when the layout lexer is asked to resume lexing mid-buffer.

    Layout resolution always rebuilds the whole token sequence, so only a
    fresh start at offset 0 with initial state 0 is supported.
    """


class ConfigError(Exception):
    """Raised on invalid layout or CLI configuration values."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path is not None else message)
