"""
Card-grid template: a coloured banner, a row of skill chips, then every
education, experience and project entry as a card in a two-column grid.

Card heights are computed by the same function that positions the card's
content, so the placement estimate and the drawn card never disagree.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from cv_assistant.services.resume_pdf.bullets import bullet_indent, has_bullet_markers, layout_bullets
from cv_assistant.services.resume_pdf.canvas import BLACK, RGB, WHITE, PdfCanvas
from cv_assistant.services.resume_pdf.document import ProfileDocument
from cv_assistant.services.resume_pdf.emitter import DocumentEmitter
from cv_assistant.services.resume_pdf.errors import ContentInsufficientError
from cv_assistant.services.resume_pdf.linebreak import Line, break_lines
from cv_assistant.services.resume_pdf.markdown import Token, tokenize, tokens_text
from cv_assistant.services.resume_pdf.metrics import HELVETICA, FontFamily, TextStyle
from cv_assistant.services.resume_pdf.style import StyleConfig

logger = logging.getLogger(__name__)

CARD_BG: RGB = (0.99, 0.99, 0.995)
CHIP_SHADOW: RGB = (0.85, 0.85, 0.9)

_SKILL_SPLIT = re.compile(r"[,;\n]+")


# ── chips ───────────────────────────────────────────────────────────────

@dataclass
class Chip:
    text: str
    bold: bool
    x: float
    y: float       # bottom edge
    width: float
    height: float


def skill_phrases(skills: str) -> List[List[Token]]:
    phrases = []
    for raw in _SKILL_SPLIT.split(skills or ""):
        tokens = tokenize(raw.strip())
        if tokens_text(tokens).strip():
            phrases.append(tokens)
    return phrases


def layout_chips(
    skills: str,
    x0: float,
    y_top: float,
    max_right: float,
    family: FontFamily,
    size: float,
    allow_bold: bool = True,
    pad_x: float = 6.0,
    pad_y: float = 3.0,
    gap: float = 6.0,
) -> Tuple[List[Chip], float]:
    """Lay out one chip per skill phrase, wrapping rows at ``max_right``.

    A phrase whose words are all bold is drawn (and measured) bold. Returns
    the chips and the y coordinate just below the last row.
    """
    style = TextStyle(family, size)
    chip_h = size + 2 * pad_y
    chips: List[Chip] = []
    cx = x0
    row_bottom = y_top - chip_h

    for tokens in skill_phrases(skills):
        words = [t for t in tokens if not t.is_space]
        bold = allow_bold and bool(words) and all(t.is_bold for t in words)
        text = tokens_text(tokens).strip()
        w = style.width(text, bold=bold) + 2 * pad_x
        if cx > x0 and cx + w > max_right:
            cx = x0
            row_bottom -= chip_h + gap
        chips.append(Chip(text, bold, cx, row_bottom, w, chip_h))
        cx += w + gap

    if not chips:
        return chips, y_top
    return chips, row_bottom - 10


# ── column balancing ────────────────────────────────────────────────────

class ColumnBalancer:
    """Places blocks into two columns, filling the less-consumed one first.

    Ties go to the column after the one used last. A block that fits neither
    column starts a new page.
    """

    def __init__(self, top: float, bottom: float, gap: float = 8.0):
        self.bottom = bottom
        self.gap = gap
        self.cursors = [top, top]
        self.preferred = 0

    def reset(self, top: float) -> None:
        self.cursors = [top, top]
        self.preferred = 0

    def _order(self) -> List[int]:
        return sorted((0, 1), key=lambda c: (-self.cursors[c], c != self.preferred))

    def choose(self, height: float) -> Optional[int]:
        for col in self._order():
            if self.cursors[col] - height >= self.bottom:
                return col
        return None

    def commit(self, col: int, height: float) -> float:
        """Consume ``height`` in ``col``; returns the card's top edge."""
        top = self.cursors[col]
        self.cursors[col] = top - height - self.gap
        self.preferred = 1 - col
        return top


# ── cards ───────────────────────────────────────────────────────────────

@dataclass
class Card:
    title: str
    meta: str = ""
    body: str = ""


@dataclass
class CardLayout:
    """Element positions relative to the card's top edge (``dy`` grows downward)."""
    title_lines: List[Tuple[float, str]] = field(default_factory=list)
    meta: Optional[Tuple[float, str]] = None
    body: List[Tuple[float, float, Line, bool]] = field(default_factory=list)
    height: float = 0.0


def _wrap_reserved(text: str, first_width: float, width: float, style: TextStyle) -> List[str]:
    """Word-wrap where the first line is narrower than the rest."""
    words = text.split()
    if not words:
        return []
    lines: List[str] = []
    current = ""
    for word in words:
        limit = first_width if not lines else width
        candidate = f"{current} {word}" if current else word
        if current and style.width(candidate, bold=True) > limit:
            lines.append(current)
            current = word
        else:
            current = candidate
    lines.append(current)
    return lines


class CardGridComposer:
    MARGIN = 48.0
    GUTTER = 18.0
    PAD = 10.0
    CARD_GAP = 8.0
    BANNER_H = 62.0
    STRIP_H = 8.0
    MINI_H = 28.0

    def __init__(self, profile: ProfileDocument, style: StyleConfig, emitter: DocumentEmitter):
        self.profile = profile
        self.style = style
        self.emitter = emitter
        self.family = HELVETICA
        self.palette = style.palette

        fs = style.font_size_pt
        self.fs = fs
        self.title_size = max(fs, 10)
        self.meta_size = max(self.title_size - 1, 9)
        self.body_style = TextStyle(self.family, max(fs - 1, 9), allow_bold=style.use_bold)
        self.title_style = TextStyle(self.family, self.title_size)

        self.left = self.MARGIN
        self.right = emitter.page_width - self.MARGIN
        self.top = emitter.page_height - self.MARGIN
        self.content_width = self.right - self.left
        self.col_width = (self.content_width - self.GUTTER) / 2

        self.canvas: Optional[PdfCanvas] = None
        self.page_index = -1
        self.balancer = ColumnBalancer(self.top, self.MARGIN, self.CARD_GAP)
        self.rendered_entries = 0

    # ── pages ───────────────────────────────────────────────────────────

    def new_page(self) -> None:
        self.canvas = self.emitter.new_page()
        self.page_index += 1
        if self.page_index > 0:
            self.draw_compact_header()
            self.balancer.reset(self.continuation_top)
            logger.debug(f"Card grid page break -> page {self.page_index + 1}")

    @property
    def continuation_top(self) -> float:
        """Top of the card area below the compact header on later pages."""
        return self.top - self.MINI_H - 20

    def column_x(self, col: int) -> float:
        return self.left + col * (self.col_width + self.GUTTER)

    # ── header ──────────────────────────────────────────────────────────

    def _contact_lines(self, max_width: float, size: float) -> List[str]:
        segments = self.profile.contact.items()
        style = TextStyle(self.family, size)
        lines: List[str] = []
        current = ""
        for seg in segments:
            candidate = f"{current} • {seg}" if current else seg
            if current and style.width(candidate) > max_width:
                lines.append(current)
                current = seg
            else:
                current = candidate
        if current:
            lines.append(current)
        return lines

    def _draw_contact(self, y: float, size: float, max_width: float) -> None:
        style = TextStyle(self.family, size)
        for line in self._contact_lines(max_width, size):
            w = style.width(line)
            self.canvas.text(self.right - 10 - w, y, line, self.family.regular, size, WHITE)
            y -= size + 2

    def draw_banner(self) -> float:
        canvas = self.canvas
        bottom = self.top - self.BANNER_H
        canvas.rect(self.left, bottom, self.content_width, self.BANNER_H, fill=self.palette.dark)
        canvas.rect(self.left, bottom, self.content_width, self.STRIP_H, fill=self.palette.light)

        name = self.profile.display_name
        name_size = max(self.fs + 9, 20)
        name_face = self.family.face(self.style.use_bold)
        name_y = self.top - self.BANNER_H / 2 - 0.36 * name_size + self.STRIP_H / 2
        canvas.text(self.left + 14, name_y, name, name_face, name_size, WHITE)

        name_w = TextStyle(self.family, name_size).width(name, bold=self.style.use_bold)
        contact_size = max(self.fs - 1, 8)
        contact_room = max(self.content_width - name_w - 48, 80)
        self._draw_contact(self.top - 18, contact_size, contact_room)
        return bottom

    def draw_compact_header(self) -> None:
        canvas = self.canvas
        bottom = self.top - self.MINI_H
        canvas.rect(self.left, bottom, self.content_width, self.MINI_H, fill=self.palette.dark)
        size = max(self.fs, 10)
        major = self.profile.education.major.strip()
        label = f"{self.profile.display_name} — {major}" if major else self.profile.display_name
        canvas.text(self.left + 10, bottom + (self.MINI_H - size) / 2 + 2, label,
                    self.family.face(self.style.use_bold), size, WHITE)

    def draw_chips(self, y_top: float) -> float:
        """Draw the skills label and chips; rows that would cross the margin move to a new page."""
        label_size = max(self.fs, 10)
        self.canvas.text(self.left, y_top - label_size, "SKILLS", self.family.bold,
                         label_size, self.palette.dark)
        y_top -= label_size + 7

        size = max(self.fs - 1, 9)
        chips, y_after = layout_chips(
            self.profile.skills, self.left, y_top, self.right, self.family,
            size, allow_bold=self.style.use_bold,
        )
        shift = 0.0
        for chip in chips:
            y = chip.y + shift
            if y < self.MARGIN:
                self.new_page()
                shift += self.continuation_top - (y + chip.height)
                y = chip.y + shift
            self.canvas.rect(chip.x + 1, y - 1, chip.width, chip.height,
                             fill=CHIP_SHADOW, opacity=0.25, radius=0.3)
            self.canvas.rect(chip.x, y, chip.width, chip.height, fill=CARD_BG,
                             stroke=self.palette.light, width=0.75, radius=0.3)
            self.canvas.text(chip.x + 6, y + 3 + size * 0.2, chip.text,
                             self.family.face(chip.bold), size, BLACK)
        return y_after + shift

    # ── cards ───────────────────────────────────────────────────────────

    def cards(self) -> List[Card]:
        cards: List[Card] = []
        edu = self.profile.education
        if not edu.is_empty:
            cards.append(Card(edu.school or "Education", (edu.study_period or "").strip(),
                              edu.major.strip()))
        for _, exp in self.profile.chosen_experiences():
            cards.append(Card(exp.heading or "Experience", exp.date_range, exp.body))
        for _, proj in self.profile.chosen_projects():
            cards.append(Card(proj.name or "Untitled Project", "", proj.body))
        return cards

    def layout_card(self, card: Card) -> CardLayout:
        pad = self.PAD
        inner = self.col_width - 2 * pad
        ttl = self.title_size
        meta_style = TextStyle(self.family, self.meta_size)
        layout = CardLayout()

        reserve = meta_style.width(card.meta) + 12 if card.meta else 0.0
        title_lines = _wrap_reserved(card.title, max(inner - reserve, 40), inner, self.title_style)
        dy = pad + max(ttl, self.meta_size if card.meta else 0)
        for i, text in enumerate(title_lines):
            layout.title_lines.append((dy + i * (ttl + 2), text))
        if card.meta:
            layout.meta = (dy, card.meta)
        dy += (len(title_lines) - 1) * (ttl + 2)

        body = (card.body or "").strip()
        if not body:
            layout.height = dy + pad + 4
            return layout

        dy += ttl + 6
        style = self.body_style
        step = style.size + 4
        if has_bullet_markers(body):
            indent = bullet_indent(style, "•")
            for item in layout_bullets(body, style, inner, indent, justify=False, markdown=True):
                for i, line in enumerate(item.lines):
                    layout.body.append((dy, indent, line, i == 0))
                    dy += step
                dy += 2
        else:
            for paragraph in body.split("\n"):
                if not paragraph.strip():
                    continue
                for line in break_lines(tokenize(paragraph.strip()), inner, style.measure):
                    layout.body.append((dy, 0.0, line, False))
                    dy += step
        layout.height = dy - style.size + pad
        return layout

    def draw_card(self, layout: CardLayout, x: float, top: float) -> None:
        canvas = self.canvas
        pad = self.PAD
        bottom = top - layout.height
        canvas.rect(x, bottom, self.col_width, layout.height, fill=CARD_BG,
                    stroke=self.palette.light, width=0.75)
        canvas.rect(x, top - 3, self.col_width, 3, fill=self.palette.accent)

        face = self.family.face(self.style.use_bold)
        for dy, text in layout.title_lines:
            canvas.text(x + pad, top - dy, text, face, self.title_size, self.palette.dark)
        if layout.meta:
            dy, meta = layout.meta
            w = TextStyle(self.family, self.meta_size).width(meta)
            canvas.text(x + self.col_width - pad - w, top - dy, meta, self.family.regular,
                        self.meta_size, BLACK)

        for dy, offset, line, marker in layout.body:
            if marker:
                canvas.bullet_dot(x + pad, top - dy, self.body_style.size, self.palette.accent)
            canvas.draw_line_tokens(line, x + pad + offset, top - dy, self.body_style)

    @property
    def fresh_column_height(self) -> float:
        """Usable height of an empty column on a continuation page."""
        return self.continuation_top - self.MARGIN

    def _line_bottom(self, dy: float) -> float:
        return dy + self.PAD + 4

    def split_layout(self, layout: CardLayout, first_cap: float, cap: float) -> List[CardLayout]:
        """Cut a laid-out card at body-line boundaries into pieces no taller than the caps.

        The first piece keeps the title and meta; later pieces carry body lines
        only, shifted up so each starts one line below the card's top padding.
        """
        pieces: List[CardLayout] = []
        current = CardLayout(layout.title_lines, layout.meta)
        shift = 0.0
        limit = first_cap
        size = self.body_style.size
        for dy, offset, line, marker in layout.body:
            local = dy - shift
            if current.body and self._line_bottom(local) > limit:
                pieces.append(current)
                current = CardLayout()
                shift = dy - (self.PAD + size)
                local = dy - shift
                limit = cap
            current.body.append((local, offset, line, marker))
            current.height = self._line_bottom(local)
        pieces.append(current)
        return pieces

    def _place_layout(self, layout: CardLayout, title: str) -> None:
        col = self.balancer.choose(layout.height)
        if col is None:
            self.new_page()
            col = self.balancer.choose(layout.height)
            if col is None:
                logger.warning(f"Card '{title}' header is taller than a page; clipping")
                col = self.balancer.preferred
        top = self.balancer.commit(col, layout.height)
        self.draw_card(layout, self.column_x(col), top)

    def place(self, card: Card) -> None:
        layout = self.layout_card(card)
        if layout.height <= self.fresh_column_height or not layout.body:
            self._place_layout(layout, card.title)
            return

        # Oversize: start in the roomiest column here if the title and a couple
        # of lines fit, otherwise on a fresh page.
        room = max(self.balancer.cursors) - self.balancer.bottom
        first_dy = layout.body[0][0]
        min_first = self._line_bottom(first_dy + self.body_style.size + 4)
        first_cap = room if room >= min_first else self.fresh_column_height
        pieces = self.split_layout(layout, first_cap, self.fresh_column_height)
        logger.info(f"Card '{card.title}' split into {len(pieces)} pieces")
        for piece in pieces:
            self._place_layout(piece, card.title)

    # ── top level ───────────────────────────────────────────────────────

    def compose(self) -> None:
        entries = len(self.profile.chosen_experiences()) + len(self.profile.chosen_projects())
        if entries == 0:
            logger.error("Card grid: no selected entries could be rendered")
            raise ContentInsufficientError(
                "Failed to generate PDF: insufficient content (none of the selected entries exist)"
            )

        self.new_page()
        y = self.draw_banner() - 16
        if self.profile.skills:
            y = self.draw_chips(y)
        self.balancer.reset(y)
        if y < self.MARGIN + 60:
            self.new_page()

        for card in self.cards():
            self.place(card)
        self.rendered_entries = entries
