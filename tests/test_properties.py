"""Property-based tests over generated indentation-sensitive sources."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from offside import resolve
from offside.config import HASKELL_LAYOUT
from offside.layout import LayoutToken

from tests.conftest import END, START, count, materialized

FRAGMENTS = [
    "x = 1",
    "f = do",
    "let y = 2",
    "let a = 1 in a",
    "where",
    "case x of",
    "-- note",
    "{- block -}",
    "y",
    "in z",
    "g x = x + 1",
    "  ",
    "",
]

PLAIN_FRAGMENTS = ["x = 1", "g x = x + 1", "-- note", "y", "in z", ""]

_line = st.tuples(st.integers(min_value=0, max_value=8), st.sampled_from(FRAGMENTS))
_plain_line = st.tuples(st.integers(min_value=0, max_value=8), st.sampled_from(PLAIN_FRAGMENTS))


def _join(lines: list[tuple[int, str]], newline: str) -> str:
    return newline.join(" " * indent + text for indent, text in lines)


sources = st.builds(
    _join, st.lists(_line, max_size=12), st.sampled_from(["\n", "\r\n"])
)
plain_sources = st.builds(_join, st.lists(_plain_line, max_size=12), st.just("\n"))


def _real(tokens: list[LayoutToken]) -> list[tuple[object, int, int]]:
    return [(t.kind, t.start, t.end) for t in tokens if not t.virtual]


class TestTotality:
    @given(sources)
    @settings(max_examples=200)
    def test_single_trailing_eof(self, source: str) -> None:
        tokens = resolve(source)
        assert tokens[-1].is_eof
        assert sum(1 for t in tokens if t.is_eof) == 1

    @given(sources)
    def test_only_ends_between_last_real_token_and_eof(self, source: str) -> None:
        tokens = resolve(source)
        tail = []
        for tok in reversed(tokens[:-1]):
            if not tok.virtual:
                break
            tail.append(tok.kind)
        assert END in tail
        assert set(tail) <= {START, END}


class TestBalance:
    @given(sources)
    @settings(max_examples=200)
    def test_starts_match_ends_without_top_level_close(self, source: str) -> None:
        tokens = resolve(source, config=HASKELL_LAYOUT.with_close_top_level(False))
        assert count(tokens, START) == count(tokens, END)

    @given(sources)
    def test_top_level_close_adds_exactly_one_end(self, source: str) -> None:
        tokens = resolve(source)
        assert count(tokens, END) == count(tokens, START) + 1


class TestOffsets:
    @given(sources)
    @settings(max_examples=200)
    def test_real_tokens_preserved_in_order(self, source: str) -> None:
        before, _ = materialized(source)
        assert _real(resolve(source)) == _real(before)

    @given(sources)
    @settings(max_examples=200)
    def test_virtual_tokens_anchor_to_following_real_token(self, source: str) -> None:
        tokens = resolve(source)
        for i, tok in enumerate(tokens):
            if not tok.virtual:
                continue
            assert tok.start == tok.end
            following = next(t for t in tokens[i + 1 :] if not t.virtual)
            assert tok.start == following.start


class TestPassThrough:
    @given(plain_sources)
    def test_no_layout_keyword_adds_only_top_level_close(self, source: str) -> None:
        before, _ = materialized(source)
        after = resolve(source)
        assert after[:-2] == before[:-1]
        assert after[-2].kind == END
        assert after[-1] == before[-1]
