"""Unit tests for mcpiper.core.highlight."""

import re
import time

from mcpiper.core.highlight import MatchSpan, highlight, match_all
from mcpiper.core.messages import McOp
from mcpiper.core.patterns import compile_pattern
from mcpiper.core.render import render_message
from mcpiper.core.styled_text import StyledText
from tests.harness.builders import make_context, make_message


class TestMatchAll:
    def test_non_overlapping_leftmost_first(self):
        assert match_all("aaaa", re.compile("aa")) == [MatchSpan(0, 2), MatchSpan(2, 2)]

    def test_greedy(self):
        assert match_all("abbbc", re.compile("b+")) == [MatchSpan(1, 3)]

    def test_no_match(self):
        assert match_all("abc", re.compile("x")) == []

    def test_empty_matches_are_reported(self):
        spans = match_all("ab", re.compile("x*"))
        assert spans
        assert all(span.length == 0 for span in spans)


class TestHighlight:
    def test_no_match_means_suppress(self):
        styled = StyledText("hello", "red")
        assert highlight(styled, re.compile("xyz"), "match") is False
        assert styled.runs[0].color == "red"

    def test_matched_spans_take_highlight_color_only(self):
        styled = StyledText()
        styled.append("get ", "hdr").append("key1 key2", "val")
        before = [styled.color_at(i) for i in range(len(styled))]

        assert highlight(styled, re.compile("key[0-9]"), "match") is True

        spans = match_all(styled.text, re.compile("key[0-9]"))
        covered = {i for s in spans for i in range(s.offset, s.offset + s.length)}
        for i in range(len(styled)):
            expected = "match" if i in covered else before[i]
            assert styled.color_at(i) == expected
        assert styled.text == "get key1 key2"

    def test_empty_match_shows_without_recolor(self):
        styled = StyledText("abc", "red")
        assert highlight(styled, re.compile("x*"), "match") is True
        assert [run.color for run in styled.runs] == ["red"]

    def test_matches_against_rendered_text(self):
        """Labels and hex-formatted numbers are searchable, not just key/value."""
        styled = render_message(make_message(op=McOp.GET, key="k", reqid=255), make_context())
        assert highlight(styled, compile_pattern("reqid: 0xff"), "red") is True
        start = styled.text.index("reqid: 0xff")
        assert styled.color_at(start) == "red"
        assert styled.color_at(start + len("reqid: 0xff") - 1) == "red"

    def test_match_spanning_runs(self):
        styled = render_message(make_message(op=McOp.SET, key="abc"), make_context())
        assert highlight(styled, compile_pattern("set abc"), "red")
        assert "set abc" in [run.text for run in styled.runs if run.color == "red"]

    def test_many_matches_in_large_value(self):
        size = 200_000
        styled = render_message(make_message(op=McOp.SET, key="k", value="a" * size), make_context())
        started = time.perf_counter()
        assert highlight(styled, compile_pattern("a"), "red") is True
        elapsed = time.perf_counter() - started

        red = [run for run in styled.runs if run.color == "red"]
        assert "a" * size in [run.text for run in red]
        assert len(styled) == len(styled.text)
        assert elapsed < 5.0
