"""Greedy line breaking and justification."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cv_assistant.services.resume_pdf.linebreak import break_lines, wrap_chars, wrap_plain
from cv_assistant.services.resume_pdf.markdown import plain_tokens, tokenize
from cv_assistant.services.resume_pdf.metrics import HELVETICA, TIMES, TextStyle


def fixed_measure(token):
    return 5.0 * len(token.text)


LOREM = (
    "Designed and shipped a distributed ingestion pipeline processing twelve million "
    "events per day while reducing infrastructure spend and improving on-call health "
    "for the platform team across three regions"
)


class TestBreakLines:
    def test_simple_break(self):
        lines = break_lines(plain_tokens("aaa bbb ccc ddd"), 40, fixed_measure)
        assert [line.text for line in lines] == ["aaa bbb", "ccc ddd"]

    def test_no_leading_or_trailing_space(self):
        lines = break_lines(plain_tokens("  aaa   bbb ccc  "), 40, fixed_measure)
        for line in lines:
            assert not line.placements[0].token.is_space
            assert not line.placements[-1].token.is_space

    def test_long_word_gets_own_line(self):
        lines = break_lines(plain_tokens("a " + "x" * 30 + " b"), 50, fixed_measure)
        assert [line.text for line in lines] == ["a", "x" * 30, "b"]

    def test_cluster_is_not_split(self):
        # bold word followed by regular comma: one cluster
        lines = break_lines(tokenize("aa **bb**, cc"), 25, fixed_measure)
        assert lines[0].text == "aa"
        assert lines[1].text.startswith("bb,")

    def test_empty_input(self):
        assert break_lines([], 100, fixed_measure) == []

    @pytest.mark.parametrize("family", [HELVETICA, TIMES])
    @pytest.mark.parametrize("width", [120, 250, 468])
    def test_lines_fit_real_metrics(self, family, width):
        style = TextStyle(family, 10)
        lines = break_lines(plain_tokens(LOREM), width, style.measure)
        words = []
        for line in lines:
            assert line.natural_width <= width + 1e-6 or line.word_count == 1
            words.extend(line.text.split())
        assert words == LOREM.split()


class TestJustification:
    def test_justified_lines_reach_full_width(self):
        lines = break_lines(plain_tokens("aaa bbb ccc ddd"), 40, fixed_measure, justify=True)
        first = lines[0]
        assert first.justified
        last_word = first.placements[-1]
        assert last_word.x + last_word.width == pytest.approx(40)

    def test_last_line_is_never_justified(self):
        lines = break_lines(plain_tokens(LOREM), 200, TextStyle(HELVETICA, 10).measure, justify=True)
        assert lines[-1].is_last
        assert not lines[-1].justified

    def test_idempotent_against_real_metrics(self):
        style = TextStyle(HELVETICA, 10)
        width = 300.0
        lines = break_lines(plain_tokens(LOREM), width, style.measure, justify=True)
        for line in lines[:-1]:
            if line.word_count < 2:
                continue
            end = line.placements[-1]
            # re-measure the drawn word independently of the breaker
            assert end.x + style.measure(end.token) == pytest.approx(width, abs=0.01)

    def test_single_word_line_not_justified(self):
        lines = break_lines(plain_tokens("x" * 30 + " y"), 50, fixed_measure, justify=True)
        assert not lines[0].justified


class TestWrapHelpers:
    def test_wrap_plain(self):
        assert wrap_plain("aaa bbb ccc ddd", 40, fixed_measure) == ["aaa bbb", "ccc ddd"]

    def test_wrap_chars_for_urls(self):
        url = "https://example.com/a/very/long/path"
        lines = wrap_chars(url, 50, lambda s: 5.0 * len(s))
        assert "".join(lines) == url
        assert all(len(line) <= 10 for line in lines)
