"""Layout resolution — rewrites a raw token stream by the offside rule.

A conventional tokenizer knows nothing about indentation. This module pulls
its whole output into a list of LayoutToken objects (adding a column and a
physical line id to each) and then makes a single pass over that list,
inserting zero-width virtual tokens that stand in for the implicit braces
and semicolons of blocks opened by layout keywords (``where``, ``let``,
``do``, ``of``). A grammar-driven parser can then treat the result as an
ordinary bracketed, semicolon-separated token stream.

Malformed input never raises here. An empty or unindented block is
abandoned and the token that ended it is reprocessed; every block still
open at EOF is closed there.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from offside.config import HASKELL_LAYOUT, LayoutConfig
from offside.log import get_logger
from offside.tokens import TokenType

if TYPE_CHECKING:
    from offside.lexer import RawTokenSource

logger = get_logger(__name__)

# Column of the implicit top-level block, closed only at end of input
TOP_LEVEL = -1


@dataclass(frozen=True, slots=True)
class LayoutToken:
    """A token enriched with its column and physical line id.

    ``kind`` is None only for the EOF sentinel. Virtual tokens have
    ``start == end``, both equal to the start of the token they precede.
    """

    kind: TokenType | None
    start: int
    end: int
    column: int
    line: int
    code: bool
    virtual: bool = False

    @property
    def is_eof(self) -> bool:
        return self.kind is None

    @property
    def is_code(self) -> bool:
        return self.code

    def __str__(self) -> str:
        name = self.kind.name if self.kind is not None else "EOF"
        return f"{name} ({self.start}, {self.end})"


@dataclass(frozen=True, slots=True)
class LayoutWarning:
    """A layout block that was abandoned because it was empty or not indented."""

    message: str
    start: int
    end: int


class LineTable:
    """Column of the first code token of every physical line, by line id."""

    def __init__(self) -> None:
        self._code_columns: list[int | None] = []

    def new_line(self) -> int:
        self._code_columns.append(None)
        return len(self._code_columns) - 1

    def record_code(self, line: int, column: int) -> None:
        """Record *column* unless the line already has a first code column."""
        if self._code_columns[line] is None:
            self._code_columns[line] = column

    def code_column(self, line: int) -> int | None:
        return self._code_columns[line]

    def __len__(self) -> int:
        return len(self._code_columns)


class IndentStack:
    """Stack of open layout columns.

    In a well-formed program the stack never underflows, but partial
    programs from an editor can close more blocks than they open, so
    peek() and pop() on an empty stack return -1 instead of raising.
    """

    def __init__(self) -> None:
        self._columns: list[int] = []

    def push(self, column: int) -> None:
        self._columns.append(column)

    def peek(self) -> int:
        return self._columns[-1] if self._columns else TOP_LEVEL

    def pop(self) -> int:
        return self._columns.pop() if self._columns else TOP_LEVEL

    def __len__(self) -> int:
        return len(self._columns)


# ----------------------------------------------------------------------
# Materialization
# ----------------------------------------------------------------------


def materialize(
    source: RawTokenSource, config: LayoutConfig = HASKELL_LAYOUT
) -> tuple[list[LayoutToken], LineTable]:
    """Drain a started raw token source into layout tokens plus their line table.

    The column resets to 0 after each end-of-line token, which is the last
    token of its line. The returned list ends with an EOF sentinel at the
    buffer end.
    """
    lines = LineTable()
    tokens: list[LayoutToken] = []
    column = 0
    line = lines.new_line()

    while not source.at_end():
        kind = source.token_type
        start = source.token_start
        end = source.token_end
        code = kind is not None and kind not in config.non_code
        tokens.append(LayoutToken(kind, start, end, column, line, code))
        if code:
            lines.record_code(line, column)

        column += end - start
        if kind == config.end_of_line:
            column = 0
            line = lines.new_line()
        source.advance()

    buffer_end = source.buffer_end
    tokens.append(LayoutToken(None, buffer_end, buffer_end, column, line, False))
    return tokens, lines


# ----------------------------------------------------------------------
# Resolution
# ----------------------------------------------------------------------


class _State(Enum):
    NOT_YET_STARTED = auto()  # no layout keyword seen yet
    WAITING_FOR_LAYOUT = auto()  # next code token sets the new block's column
    NORMAL = auto()  # emitting separators and closes


class LayoutResolver:
    """Single pass over materialized tokens that inserts virtual delimiters."""

    def __init__(
        self,
        tokens: list[LayoutToken],
        lines: LineTable,
        config: LayoutConfig = HASKELL_LAYOUT,
    ) -> None:
        self._input = tokens
        self._lines = lines
        self._config = config
        self._out: list[LayoutToken] = []
        self._stack = IndentStack()
        self._state = _State.NOT_YET_STARTED
        self._opener: LayoutToken | None = None
        self.warnings: list[LayoutWarning] = []

    def resolve(self) -> list[LayoutToken]:
        """Return a new token list with virtual start/separator/end tokens."""
        self._out = []
        self._stack = IndentStack()
        self._stack.push(TOP_LEVEL)
        self._state = _State.NOT_YET_STARTED
        self._opener = None
        self.warnings = []

        depth = 0
        i = 0
        while i < len(self._input):
            token = self._input[i]
            if token.is_eof:
                depth = len(self._stack)
                self._finish(token)
                break
            # A step that changes state without consuming re-dispatches the token
            if self._step(token):
                i += 1

        logger.debug(
            "resolved %d tokens into %d (%d abandoned blocks, stack depth %d at EOF)",
            len(self._input),
            len(self._out),
            len(self.warnings),
            depth,
        )
        return self._out

    # ------------------------------------------------------------------
    # State dispatch
    # ------------------------------------------------------------------

    def _step(self, token: LayoutToken) -> bool:
        """Process one token; return False if it must be processed again."""
        if self._state is _State.NOT_YET_STARTED:
            if self._is_layout_creating(token):
                self._wait_for_layout(token)
            self._out.append(token)
            return True

        if self._state is _State.WAITING_FOR_LAYOUT:
            return self._step_waiting(token)

        self._step_normal(token)
        return True

    def _step_waiting(self, token: LayoutToken) -> bool:
        if token.is_code and token.column > self._stack.peek():
            self._out.append(self._virtual(self._config.layout_start, token))
            self._stack.push(token.column)
            logger.debug("opened block at column %d (offset %d)", token.column, token.start)
            if self._is_layout_creating(token):
                self._opener = token
            else:
                self._state = _State.NORMAL
            self._out.append(token)
            return True

        if self._is_next_layout_line(token) and token.column <= self._stack.peek():
            # The block is empty (still being typed) or its first line is not
            # indented: give up on it and reprocess this token as Normal.
            self._abandon(token)
            self._state = _State.NORMAL
            return False

        self._out.append(token)
        return True

    def _step_normal(self, token: LayoutToken) -> None:
        if self._is_layout_creating(token):
            self._wait_for_layout(token)

        if self._is_next_layout_line(token):
            self._close_or_separate(token)

        # Only a real block is closed here; the top-level block ends at EOF
        if self._is_single_line_let_in(token) and self._stack.peek() > TOP_LEVEL:
            self._out.append(self._virtual(self._config.layout_end, token))
            closed = self._stack.pop()
            logger.debug("closed single-line let block at column %d", closed)

        self._out.append(token)

    def _finish(self, eof: LayoutToken) -> None:
        """Close everything still open and append the EOF sentinel."""
        if self._state is _State.WAITING_FOR_LAYOUT:
            # Layout keyword at end of input: the block is opened and closed empty
            self._out.append(self._virtual(self._config.layout_start, eof))
            self._out.append(self._virtual(self._config.layout_end, eof))

        while len(self._stack):
            column = self._stack.pop()
            if column > TOP_LEVEL or self._config.close_top_level:
                self._out.append(self._virtual(self._config.layout_end, eof))
        self._out.append(eof)

    # ------------------------------------------------------------------
    # Block structure
    # ------------------------------------------------------------------

    def _close_or_separate(self, token: LayoutToken) -> None:
        """Compare the first code token of a line against the open blocks.

        Same column as the innermost block: separator. Left of it: close
        the block and compare again. Right of it: continuation, nothing.
        """
        at = self._insertion_index()
        anchor = self._out[at] if at < len(self._out) else token

        while True:
            top = self._stack.peek()
            if token.column == top:
                self._out.insert(at, self._virtual(self._config.layout_separator, anchor))
                return
            if token.column < top:
                self._out.insert(at, self._virtual(self._config.layout_end, anchor))
                at += 1
                self._stack.pop()
                logger.debug("closed block at column %d (offset %d)", top, anchor.start)
                continue
            return

    def _insertion_index(self) -> int:
        """Index of the end-of-line token following the last emitted code token.

        Inserting there keeps trailing whitespace and comments with the line
        they end, while comments on the lines that follow stay outside.
        """
        out = self._out
        for k in range(len(out) - 1, -1, -1):
            if out[k].is_code:
                for m in range(k + 1, len(out)):
                    if out[m].kind == self._config.end_of_line:
                        return m
                break
        return len(out)

    def _is_single_line_let_in(self, token: LayoutToken) -> bool:
        """True if *token* is ``in`` and its ``let`` is earlier on the same line."""
        let_in = self._config.let_in
        if token.kind != let_in.in_:
            return False
        for prev in reversed(self._out):
            if prev.kind == let_in.let:
                return True
            if prev.line != token.line:
                return False
        return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_layout_creating(self, token: LayoutToken) -> bool:
        return token.kind in self._config.layout_creating

    def _is_next_layout_line(self, token: LayoutToken) -> bool:
        return token.is_code and self._lines.code_column(token.line) == token.column

    def _wait_for_layout(self, opener: LayoutToken) -> None:
        self._state = _State.WAITING_FOR_LAYOUT
        self._opener = opener

    def _abandon(self, token: LayoutToken) -> None:
        opener = self._opener
        keyword = _keyword_name(opener.kind) if opener is not None else "layout keyword"
        where = opener if opener is not None else token
        self.warnings.append(
            LayoutWarning(
                f"empty or unindented block after '{keyword}'", where.start, where.end
            )
        )
        logger.debug("abandoned block after %r at offset %d", keyword, where.start)

    @staticmethod
    def _virtual(kind: TokenType, anchor: LayoutToken) -> LayoutToken:
        """Zero-width token of *kind* at the start of *anchor*, on its line."""
        return LayoutToken(
            kind=kind,
            start=anchor.start,
            end=anchor.start,
            column=anchor.column,
            line=anchor.line,
            code=True,
            virtual=True,
        )


def _keyword_name(kind: TokenType | None) -> str:
    if kind is None:
        return "EOF"
    return kind.name.lower().removeprefix("kw_")


def resolve_layout(
    tokens: list[LayoutToken],
    lines: LineTable,
    config: LayoutConfig = HASKELL_LAYOUT,
) -> list[LayoutToken]:
    """Convenience function: resolve layout over materialized tokens."""
    return LayoutResolver(tokens, lines, config).resolve()
