"""
Bullet formatting: split free text into bullet items and wrap each one with a
hanging indent.
"""

import re
from dataclasses import dataclass
from typing import List

from cv_assistant.services.resume_pdf.linebreak import Line, break_lines
from cv_assistant.services.resume_pdf.markdown import plain_tokens, tokenize
from cv_assistant.services.resume_pdf.metrics import TextStyle

# "*" and "-" only count as markers when followed by whitespace so that
# "*italic*" and "-5%" are left alone.
_LINE_MARKER = re.compile(r"^\s*(?:[•▪–—]|[\*\-](?=\s))\s*")
_INLINE_MARKER = re.compile(r"\s+[•▪]\s+")


@dataclass
class BulletItem:
    text: str
    lines: List[Line]


def has_bullet_markers(text: str) -> bool:
    return any(_LINE_MARKER.match(line) for line in (text or "").split("\n") if line.strip())


def split_bullet_items(text: str) -> List[str]:
    """Split ``text`` into bullet item strings.

    With explicit markers every marker starts an item that runs to the next
    marker or newline. Without markers each non-empty line is an item.
    """
    lines = [line.strip() for line in (text or "").split("\n") if line.strip()]
    if not lines:
        return []

    if not has_bullet_markers(text):
        return lines

    items: List[str] = []
    for line in lines:
        stripped = _LINE_MARKER.sub("", line, count=1)
        for piece in _INLINE_MARKER.split(stripped):
            piece = piece.strip()
            if piece:
                items.append(piece)
    return items


def bullet_indent(style: TextStyle, glyph: str) -> float:
    return style.width(f"{glyph}  ")


def layout_bullets(
    text: str,
    style: TextStyle,
    max_width: float,
    indent: float,
    justify: bool = True,
    markdown: bool = False,
) -> List[BulletItem]:
    """Wrap every bullet item at ``max_width - indent``.

    All lines of an item except its last are justified when ``justify`` is on.
    """
    inner = max(max_width - indent, 1.0)
    items: List[BulletItem] = []
    for item_text in split_bullet_items(text):
        tokens = tokenize(item_text) if markdown else plain_tokens(item_text)
        lines = break_lines(tokens, inner, style.measure, justify=justify)
        if lines:
            items.append(BulletItem(item_text, lines))
    return items
