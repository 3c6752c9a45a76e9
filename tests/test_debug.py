"""Test the token dump and rendering helpers."""

from __future__ import annotations

import io
import json

from offside import resolve
from offside.debug import dump_raw_tokens, format_tokens, render_braces, tokens_to_json
from offside.lexer import tokenize


class TestRenderBraces:
    def test_real_tokens_reproduce_source(self):
        source = "f = 1\n-- c\ng = 2\n"
        rendered = render_braces(resolve(source), source)
        assert rendered.rstrip("}") == source

    def test_virtual_tokens_spelled_out(self):
        source = "f = do\n  a\n  b"
        assert render_braces(resolve(source), source) == "f = do\n  {a;\n  b}}"


class TestFormatTokens:
    def test_one_row_per_token(self):
        tokens = resolve("x")
        rows = format_tokens(tokens).splitlines()
        assert len(rows) == len(tokens)

    def test_virtual_rows_marked(self):
        rows = format_tokens(resolve("x")).splitlines()
        assert rows[0].startswith(" VARID")
        assert rows[1].startswith("*VIRTUAL_RIGHT_BRACE")
        assert rows[2].startswith(" EOF")


class TestJson:
    def test_round_trips_through_json(self):
        data = json.loads(tokens_to_json(resolve("x")))
        assert data[0] == {
            "kind": "VARID",
            "start": 0,
            "end": 1,
            "column": 0,
            "line": 0,
            "virtual": False,
        }
        assert data[1]["virtual"] is True
        assert data[2]["kind"] == "EOF"


class TestDumpRawTokens:
    def test_writes_positions_and_values(self):
        buf = io.StringIO()
        dump_raw_tokens(tokenize("f x"), file=buf)
        lines = buf.getvalue().splitlines()
        assert lines[0] == "1:1 VARID 'f'"
        assert lines[-1] == "1:4 EOF ''"
