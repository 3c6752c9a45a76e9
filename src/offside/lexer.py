"""Raw lexer: converts source text into a flat, layout-unaware token stream."""

from __future__ import annotations

from typing import Protocol

from offside.errors import LexError
from offside.tokens import (
    KEYWORDS,
    PUNCTUATION,
    Position,
    Span,
    Token,
    TokenType,
    is_ident_char,
    is_ident_start,
    is_symbol_char,
)

_WS_CHARS = " \t\f\v"


class Lexer:
    """Tokenize source text into a stream of Token objects."""

    def __init__(self, source: str, filename: str = "input.hs") -> None:
        self._source = source
        self._filename = filename
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list, ending with EOF."""
        while self._pos < len(self._source):
            self._lex_token()
        self._emit(TokenType.EOF, "", self._current_pos())
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _emit(self, tt: TokenType, value: str, start: Position) -> Token:
        tok = Token(tt, value, Span(start, self._current_pos()))
        self._tokens.append(tok)
        return tok

    def _emit_from(self, tt: TokenType, start: Position) -> Token:
        """Emit a token whose value is the source text from *start* to here."""
        return self._emit(tt, self._source[start.offset : self._pos], start)

    def _error(self, message: str, pos: Position | None = None) -> LexError:
        if pos is None:
            pos = self._current_pos()
        return LexError(message, pos, self._source)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _lex_token(self) -> None:
        ch = self._peek()
        start = self._current_pos()

        if ch == "\0":
            raise self._error("NUL character in source")

        if ch == "\n":
            self._advance()
            self._emit(TokenType.NEWLINE, "\n", start)
            return

        if ch == "\r" and self._peek(1) == "\n":
            self._advance()
            self._advance()
            self._emit(TokenType.NEWLINE, "\r\n", start)
            return

        if ch in _WS_CHARS or ch == "\r":
            self._lex_ws()
            return

        if ch == "{" and self._peek(1) == "-":
            self._lex_block_comment()
            return

        if ch == "-" and self._at_line_comment():
            self._lex_line_comment()
            return

        if ch in PUNCTUATION:
            self._advance()
            self._emit(PUNCTUATION[ch], ch, start)
            return

        if ch == '"':
            self._lex_string()
            return

        if ch == "'":
            self._lex_char()
            return

        if ch.isdigit():
            self._lex_number()
            return

        if is_ident_start(ch):
            self._lex_identifier()
            return

        if is_symbol_char(ch):
            self._lex_operator()
            return

        raise self._error(f"unexpected character {ch!r}")

    def _lex_ws(self) -> None:
        start = self._current_pos()
        while self._pos < len(self._source):
            ch = self._peek()
            if ch in _WS_CHARS or (ch == "\r" and self._peek(1) != "\n"):
                self._advance()
            else:
                break
        self._emit_from(TokenType.WS, start)

    def _lex_identifier(self) -> None:
        start = self._current_pos()
        while self._pos < len(self._source) and is_ident_char(self._peek()):
            self._advance()
        text = self._source[start.offset : self._pos]
        if text in KEYWORDS:
            tt = KEYWORDS[text]
        elif text[0].isupper():
            tt = TokenType.CONID
        else:
            tt = TokenType.VARID
        self._emit(tt, text, start)

    def _lex_operator(self) -> None:
        start = self._current_pos()
        while self._pos < len(self._source) and is_symbol_char(self._peek()):
            self._advance()
        text = self._source[start.offset : self._pos]
        self._emit(TokenType.EQUALS if text == "=" else TokenType.OPERATOR, text, start)

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def _lex_number(self) -> None:
        start = self._current_pos()

        if self._peek() == "0" and self._peek(1) in ("x", "X") and _is_hex(self._peek(2)):
            self._advance()
            self._advance()
            while _is_hex(self._peek()):
                self._advance()
            self._emit_from(TokenType.INTEGER, start)
            return

        self._skip_digits()
        tt = TokenType.INTEGER

        if self._peek() == "." and self._peek(1).isdigit():
            self._advance()
            self._skip_digits()
            tt = TokenType.FLOAT

        if self._peek() in ("e", "E"):
            sign = 1 if self._peek(1) in ("+", "-") else 0
            if self._peek(1 + sign).isdigit():
                for _ in range(1 + sign):
                    self._advance()
                self._skip_digits()
                tt = TokenType.FLOAT

        self._emit_from(tt, start)

    def _skip_digits(self) -> None:
        while self._peek().isdigit():
            self._advance()

    def _lex_string(self) -> None:
        start = self._current_pos()
        self._advance()  # opening quote
        while True:
            ch = self._peek()
            if ch == "" or ch == "\n":
                raise self._error("unterminated string literal", start)
            if ch == "\\":
                self._advance()
                if self._peek() == "":
                    raise self._error("unterminated string literal", start)
                self._advance()
                continue
            self._advance()
            if ch == '"':
                break
        self._emit_from(TokenType.STRING, start)

    def _lex_char(self) -> None:
        start = self._current_pos()
        self._advance()  # opening quote
        if self._peek() == "\\":
            self._advance()
            while self._peek() not in ("'", "\n", ""):
                self._advance()
        elif self._peek() not in ("'", "\n", ""):
            self._advance()
        if self._peek() != "'":
            raise self._error("unterminated character literal", start)
        self._advance()
        self._emit_from(TokenType.CHAR, start)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _at_line_comment(self) -> bool:
        """Two or more dashes not followed by another symbol character."""
        n = 0
        while self._peek(n) == "-":
            n += 1
        return n >= 2 and not is_symbol_char(self._peek(n))

    def _lex_line_comment(self) -> None:
        start = self._current_pos()
        while self._pos < len(self._source) and self._peek() != "\n":
            if self._peek() == "\r" and self._peek(1) == "\n":
                break
            self._advance()
        self._emit_from(TokenType.LINE_COMMENT, start)

    def _lex_block_comment(self) -> None:
        start = self._current_pos()
        depth = 0
        while self._pos < len(self._source):
            if self._peek() == "{" and self._peek(1) == "-":
                self._advance()
                self._advance()
                depth += 1
            elif self._peek() == "-" and self._peek(1) == "}":
                self._advance()
                self._advance()
                depth -= 1
                if depth == 0:
                    self._emit_from(TokenType.BLOCK_COMMENT, start)
                    return
            else:
                self._advance()
        raise self._error("unterminated block comment", start)


def _is_hex(ch: str) -> bool:
    return ch != "" and ch in "0123456789abcdefABCDEF"


def tokenize(source: str, filename: str = "input.hs") -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source, filename).tokenize()


# ----------------------------------------------------------------------
# Step-wise token source
# ----------------------------------------------------------------------


class RawTokenSource(Protocol):
    """A sequential tokenizer: current token kind and offsets, single-step advance."""

    def start(
        self,
        buffer: str,
        start_offset: int = 0,
        end_offset: int | None = None,
        initial_state: int = 0,
    ) -> None: ...

    @property
    def token_type(self) -> TokenType | None: ...

    @property
    def token_start(self) -> int: ...

    @property
    def token_end(self) -> int: ...

    def advance(self) -> None: ...

    def at_end(self) -> bool: ...

    @property
    def state(self) -> int: ...

    @property
    def buffer(self) -> str: ...

    @property
    def buffer_end(self) -> int: ...


class TokenSource:
    """RawTokenSource backed by Lexer.

    The whole buffer range is tokenized on start(); the raw EOF token is not
    exposed, token_type is None once the source is exhausted.
    """

    def __init__(self, filename: str = "input.hs") -> None:
        self._filename = filename
        self._buffer = ""
        self._buffer_end = 0
        self._base = 0
        self._tokens: list[Token] = []
        self._index = 0
        self._state = 0

    def start(
        self,
        buffer: str,
        start_offset: int = 0,
        end_offset: int | None = None,
        initial_state: int = 0,
    ) -> None:
        end = len(buffer) if end_offset is None else end_offset
        self._buffer = buffer
        self._buffer_end = end
        self._base = start_offset
        self._tokens = tokenize(buffer[start_offset:end], self._filename)[:-1]
        self._index = 0
        self._state = initial_state

    def _current(self) -> Token | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    @property
    def token_type(self) -> TokenType | None:
        tok = self._current()
        return tok.type if tok is not None else None

    @property
    def token_start(self) -> int:
        tok = self._current()
        return self._base + tok.span.start.offset if tok is not None else self._buffer_end

    @property
    def token_end(self) -> int:
        tok = self._current()
        return self._base + tok.span.end.offset if tok is not None else self._buffer_end

    def advance(self) -> None:
        if self._index < len(self._tokens):
            self._index += 1

    def at_end(self) -> bool:
        return self._index >= len(self._tokens)

    @property
    def state(self) -> int:
        # The raw lexer carries no state between tokens
        return self._state

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def buffer_end(self) -> int:
        return self._buffer_end
