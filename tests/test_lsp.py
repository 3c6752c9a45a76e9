"""Tests for the LSP server — diagnostic generation."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    PublishDiagnosticsParams,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from offside.lsp import _offset_to_position, _validate


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = "file:///Main.hs") -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="haskell", version=0, text=source)
        )

    return ls, published, put


# ---------------------------------------------------------------------------
# Lex errors → Error severity
# ---------------------------------------------------------------------------


class TestLexErrors:
    def test_unterminated_string(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put('main = "hello')
        _validate(ls, "file:///Main.hs")

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert "unterminated string" in d.message
        assert d.source == "offside"
        # The string starts at column 8 (1-based) → character 7 (0-based)
        assert d.range.start.line == 0
        assert d.range.start.character == 7


# ---------------------------------------------------------------------------
# Abandoned layout blocks → Warning severity
# ---------------------------------------------------------------------------


class TestLayoutWarnings:
    def test_empty_where_block(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("f = do\n  a\n  b = x where\n  c\n")
        _validate(ls, "file:///Main.hs")

        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Warning
        assert "where" in d.message
        assert (d.range.start.line, d.range.start.character) == (2, 8)
        assert (d.range.end.line, d.range.end.character) == (2, 13)


# ---------------------------------------------------------------------------
# Clean document → empty diagnostics
# ---------------------------------------------------------------------------


class TestCleanDocument:
    def test_valid_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("module Main where\n\nmain = do\n  print 1\n")
        _validate(ls, "file:///Main.hs")

        assert len(published) == 1
        assert published[0].diagnostics == []

    def test_fixing_the_document_clears_diagnostics(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put('main = "oops')
        _validate(ls, "file:///Main.hs")
        put('main = "fixed"')
        _validate(ls, "file:///Main.hs")

        assert len(published) == 2
        assert published[1].diagnostics == []


# ---------------------------------------------------------------------------
# Offset conversion
# ---------------------------------------------------------------------------


class TestOffsetToPosition:
    def test_first_line(self) -> None:
        pos = _offset_to_position("abc", 2)
        assert (pos.line, pos.character) == (0, 2)

    def test_after_newline(self) -> None:
        pos = _offset_to_position("ab\ncd", 3)
        assert (pos.line, pos.character) == (1, 0)
