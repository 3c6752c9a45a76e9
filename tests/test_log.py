"""Test logger namespacing and the resolver's debug records."""

import logging

from offside import resolve
from offside.log import get_logger


class TestGetLogger:
    def test_adds_prefix(self):
        assert get_logger("mymodule").name == "offside.mymodule"

    def test_keeps_existing_prefix(self):
        assert get_logger("offside.layout").name == "offside.layout"
        assert get_logger("offside").name == "offside"


class TestResolverLogging:
    def test_summary_reports_stack_depth_at_eof(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="offside"):
            resolve("f = do\n  a\n")
        messages = [r.getMessage() for r in caplog.records]
        # top-level block plus the do block
        assert any("stack depth 2 at EOF" in m for m in messages)

    def test_abandoned_block_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="offside.layout"):
            resolve("f = do\n  a\n  b = x where\n  c\n")
        assert any("abandoned block after 'where'" in r.getMessage() for r in caplog.records)
