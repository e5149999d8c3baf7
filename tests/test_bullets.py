"""Bullet item splitting and hanging-indent layout."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cv_assistant.services.resume_pdf.bullets import (
    bullet_indent,
    has_bullet_markers,
    layout_bullets,
    split_bullet_items,
)
from cv_assistant.services.resume_pdf.metrics import HELVETICA, TextStyle


class TestSplitBulletItems:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("• one\n• two", ["one", "two"]),
            ("- first\n- second", ["first", "second"]),
            ("* star item\n* other", ["star item", "other"]),
            ("– dash\n— em", ["dash", "em"]),
            ("• a • b • c", ["a", "b", "c"]),
            ("line one\nline two\n\n", ["line one", "line two"]),
            ("single blob of text", ["single blob of text"]),
        ],
    )
    def test_split(self, text, expected):
        assert split_bullet_items(text) == expected

    def test_hyphenated_numbers_are_not_markers(self):
        assert not has_bullet_markers("-5% churn after launch")
        assert split_bullet_items("-5% churn after launch") == ["-5% churn after launch"]

    def test_empty(self):
        assert split_bullet_items("") == []
        assert split_bullet_items("   \n  ") == []


class TestLayoutBullets:
    def test_lines_fit_inside_indent(self):
        style = TextStyle(HELVETICA, 10)
        indent = bullet_indent(style, "•")
        text = (
            "• Migrated the billing service to an event-driven architecture with idempotent consumers\n"
            "• Cut p99 latency from 900ms to 120ms by introducing request coalescing and caching"
        )
        items = layout_bullets(text, style, 220, indent)
        assert len(items) == 2
        for item in items:
            assert len(item.lines) > 1
            for line in item.lines:
                assert line.natural_width <= 220 - indent + 1e-6
            assert item.lines[-1].is_last
            assert not item.lines[-1].justified

    def test_markdown_items_keep_bold(self):
        style = TextStyle(HELVETICA, 10)
        items = layout_bullets("• **Led** the team", style, 400, 10, markdown=True)
        first = items[0].lines[0].placements[0].token
        assert first.text == "Led"
        assert first.is_bold
