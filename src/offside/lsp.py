"""Minimal LSP server — lexing and layout diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from offside import __version__
from offside.errors import LexError
from offside.layout_lexer import LayoutLexer
from offside.lexer import TokenSource
from offside.log import get_logger

logger = get_logger(__name__)

server = LanguageServer(
    "offside-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def _offset_to_position(source: str, offset: int) -> Position:
    """Convert a character offset to a 0-based LSP position."""
    line = source.count("\n", 0, offset)
    line_start = source.rfind("\n", 0, offset) + 1
    return Position(line=line, character=offset - line_start)


def _validate(ls: LanguageServer, uri: str) -> None:
    """Re-lex the whole document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    filename = uri.rsplit("/", 1)[-1] if "/" in uri else uri
    diagnostics: list[Diagnostic] = []

    # A fresh lexer per run: nothing is carried over between edits
    lexer = LayoutLexer(TokenSource(filename))
    try:
        lexer.start(source)
    except LexError as exc:
        line = exc.position.line - 1
        col = exc.position.column - 1
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + 1),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="offside",
            )
        )
    else:
        for warning in lexer.warnings:
            diagnostics.append(
                Diagnostic(
                    range=Range(
                        start=_offset_to_position(source, warning.start),
                        end=_offset_to_position(source, warning.end),
                    ),
                    message=warning.message,
                    severity=DiagnosticSeverity.Warning,
                    source="offside",
                )
            )

    logger.debug("%s: %d diagnostics", filename, len(diagnostics))
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
