"""Layout lexer — wraps a raw token source and serves the resolved stream."""

from __future__ import annotations

from collections.abc import Iterator

from offside.config import HASKELL_LAYOUT, LayoutConfig
from offside.errors import IncrementalLexError
from offside.layout import LayoutResolver, LayoutToken, LayoutWarning, materialize
from offside.lexer import RawTokenSource
from offside.tokens import TokenType


class LayoutLexer:
    """Current-token/advance view over a layout-resolved token stream.

    start() lexes and resolves the entire buffer before the first token is
    served; the result is read-only afterwards. Each start() rebuilds
    everything from scratch.
    """

    def __init__(self, source: RawTokenSource, config: LayoutConfig = HASKELL_LAYOUT) -> None:
        self._source = source
        self._config = config
        self._tokens: list[LayoutToken] = []
        self._warnings: list[LayoutWarning] = []
        self._index = 0

    def start(
        self,
        buffer: str,
        start_offset: int = 0,
        end_offset: int | None = None,
        initial_state: int = 0,
    ) -> None:
        if start_offset != 0:
            raise IncrementalLexError(
                f"does not support incremental lexing: start_offset must be 0, got {start_offset}"
            )
        if initial_state != 0:
            raise IncrementalLexError(
                f"does not support incremental lexing: initial_state must be 0, got {initial_state}"
            )

        # Drop the previous stream first so a failed restart leaves nothing stale
        self._tokens = []
        self._warnings = []
        self._index = 0

        self._source.start(buffer, start_offset, end_offset, initial_state)
        tokens, lines = materialize(self._source, self._config)
        resolver = LayoutResolver(tokens, lines, self._config)
        self._tokens = resolver.resolve()
        self._warnings = resolver.warnings
        self._index = 0

    # ------------------------------------------------------------------
    # Current token
    # ------------------------------------------------------------------

    def _current(self) -> LayoutToken | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    @property
    def token(self) -> LayoutToken | None:
        return self._current()

    @property
    def token_type(self) -> TokenType | None:
        """Kind of the current token, None at EOF."""
        tok = self._current()
        return tok.kind if tok is not None else None

    @property
    def token_start(self) -> int | None:
        tok = self._current()
        return tok.start if tok is not None else None

    @property
    def token_end(self) -> int | None:
        tok = self._current()
        return tok.end if tok is not None else None

    def advance(self) -> None:
        """Move to the next token; a no-op at EOF."""
        tok = self._current()
        if tok is not None and not tok.is_eof:
            self._index += 1

    # ------------------------------------------------------------------
    # Host bookkeeping
    # ------------------------------------------------------------------

    @property
    def state(self) -> int:
        return self._source.state

    @property
    def buffer(self) -> str:
        return self._source.buffer

    @property
    def buffer_end(self) -> int:
        return self._source.buffer_end

    @property
    def tokens(self) -> tuple[LayoutToken, ...]:
        return tuple(self._tokens)

    @property
    def warnings(self) -> tuple[LayoutWarning, ...]:
        return tuple(self._warnings)

    def __iter__(self) -> Iterator[LayoutToken]:
        return iter(self._tokens)
