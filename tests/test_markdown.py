"""Markdown-subset tokenizer."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cv_assistant.services.resume_pdf.markdown import (
    Emphasis,
    has_markdown,
    plain_tokens,
    strip_markdown,
    tokenize,
    tokens_text,
)


class TestTokenize:
    def test_bold_word(self):
        tokens = tokenize("Built **fast** APIs")
        assert [t.text for t in tokens] == ["Built", " ", "fast", " ", "APIs"]
        assert [t.is_bold for t in tokens] == [False, False, True, False, False]

    def test_bold_phrase_splits_into_words(self):
        tokens = tokenize("**cut costs 40%** overall")
        words = [t for t in tokens if not t.is_space]
        assert [w.text for w in words] == ["cut", "costs", "40%", "overall"]
        assert [w.is_bold for w in words] == [True, True, True, False]

    def test_spaces_never_carry_emphasis(self):
        for tok in tokenize("**a b  c**"):
            if tok.is_space:
                assert tok.emphasis is Emphasis.NONE

    def test_italic_falls_back_to_regular(self):
        tokens = tokenize("*Python* and Go")
        assert tokens[0].text == "Python"
        assert tokens[0].emphasis is Emphasis.NONE

    @pytest.mark.parametrize("text", ["**unclosed", "trailing *star", "****"])
    def test_unclosed_markers_stay_literal(self, text):
        assert tokens_text(tokenize(text)) == text

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("plain text only", "plain text only"),
            ("a **b c** d", "a b c d"),
            ("*x* and **y**", "x and y"),
            ("Led **3** teams, shipped *fast*.", "Led 3 teams, shipped fast."),
        ],
    )
    def test_round_trip_drops_only_delimiters(self, text, expected):
        assert tokens_text(tokenize(text)) == expected

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize(None) == []


class TestHelpers:
    def test_plain_tokens_ignore_markers(self):
        assert tokens_text(plain_tokens("**raw**")) == "**raw**"

    def test_has_markdown(self):
        assert has_markdown("uses **bold**")
        assert not has_markdown("no markers here")

    def test_strip_markdown_keeps_lines(self):
        text = "- **Led** the team\n* shipped *v2*\nplain"
        assert strip_markdown(text) == "Led the team\nshipped v2\nplain"
