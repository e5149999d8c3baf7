"""
Template-driven section composer.

One composer renders the header, Education, Skills, Experience and Projects
sections for every single-flow template. A ``TemplatePreset`` carries what
differs between templates (fonts, margins, spacing, section order, header
layout, bullet marker) and the sidebar template overrides the two hooks that
actually change shape: the header and the skills block.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from cv_assistant.services.resume_pdf.bullets import bullet_indent, layout_bullets
from cv_assistant.services.resume_pdf.canvas import BLACK, RGB, PdfCanvas
from cv_assistant.services.resume_pdf.document import ProfileDocument
from cv_assistant.services.resume_pdf.emitter import DocumentEmitter
from cv_assistant.services.resume_pdf.errors import ContentInsufficientError
from cv_assistant.services.resume_pdf.flow import Margins, PageFlow
from cv_assistant.services.resume_pdf.linebreak import Line, break_lines, wrap_chars, wrap_plain
from cv_assistant.services.resume_pdf.markdown import (
    Emphasis,
    Token,
    has_markdown,
    plain_tokens,
    strip_markdown,
    tokenize,
)
from cv_assistant.services.resume_pdf.metrics import HELVETICA, TIMES, FontFamily, TextStyle
from cv_assistant.services.resume_pdf.style import StyleConfig, TemplateId

logger = logging.getLogger(__name__)

# Minimum distance the cursor must travel on a one-page document.
MIN_CONTENT_ADVANCE = 72.0

_LEADING_LIST_MARKER = re.compile(r"^\s*(?:[•▪–—]|[\*\-](?=\s))\s*")
_SKILL_SPLIT = re.compile(r"[,;\n]+")


@dataclass(frozen=True)
class TemplatePreset:
    template_id: TemplateId
    family: FontFamily
    margins: Margins
    section_order: Tuple[str, ...]
    header: str                       # "centered" | "centered-two-line" | "split"
    center_titles: bool = False
    bullet_glyph: Optional[str] = "•"  # None draws a filled accent square
    title_delta: int = 1
    title_floor: int = 10
    name_delta: int = 7
    name_floor: int = 14
    line_gap: float = 4.0
    section_gap: float = 8.0
    title_gap: float = 6.0
    rule_gap: float = 10.0
    rule_width: float = 1.0
    entry_gap: float = 4.0


HARVARD = TemplatePreset(
    template_id=TemplateId.HARVARD,
    family=HELVETICA,
    margins=Margins(72, 72, 72, 72),
    section_order=("education", "skills", "projects", "experience"),
    header="centered",
)

CHRONOLOGICAL = TemplatePreset(
    template_id=TemplateId.CHRONOLOGICAL,
    family=HELVETICA,
    margins=Margins(64, 64, 64, 64),
    section_order=("education", "skills", "experience", "projects"),
    header="centered-two-line",
    center_titles=True,
    bullet_glyph=None,
    title_delta=2,
    title_floor=11,
    name_delta=9,
    name_floor=16,
    line_gap=6.0,
    section_gap=12.0,
    title_gap=8.0,
    rule_gap=12.0,
    rule_width=1.2,
    entry_gap=6.0,
)

SIDEBAR_SERIF = TemplatePreset(
    template_id=TemplateId.SIDEBAR_SERIF,
    family=TIMES,
    # the flow margins describe the main (right) column
    margins=Margins(54 + 180 + 18, 54, 54, 54),
    section_order=("education", "experience", "projects"),
    header="split",
    bullet_glyph="–",
    title_delta=1,
    title_floor=12,
    name_delta=7,
    name_floor=16,
    section_gap=0.0,
    title_gap=4.0,
    entry_gap=6.0,
)


class SectionComposer:
    """Single-flow composer for the harvard and chronological templates."""

    def __init__(self, profile: ProfileDocument, style: StyleConfig,
                 preset: TemplatePreset, emitter: DocumentEmitter):
        self.profile = profile
        self.style = style
        self.preset = preset
        self.emitter = emitter
        self.accent = style.palette.accent
        self.flow = PageFlow(emitter, preset.margins, on_new_page=self.on_new_page)
        self.rendered_entries = 0

        fs = style.font_size_pt
        self.fs = fs
        self.body = TextStyle(preset.family, max(fs - 1, 8), allow_bold=style.use_bold)
        self.title_size = max(fs + preset.title_delta, preset.title_floor)
        self.name_size = max(fs + preset.name_delta, preset.name_floor)
        self.contact_size = max(fs - 1, 8)

    # ── hooks ───────────────────────────────────────────────────────────

    def on_new_page(self, canvas: PdfCanvas) -> float:
        """Running header for continuation pages. Single-flow templates have none."""
        return 0.0

    @property
    def canvas(self) -> PdfCanvas:
        return self.flow.canvas

    @property
    def heading_face(self) -> str:
        return self.preset.family.face(self.style.use_bold)

    # ── top level ───────────────────────────────────────────────────────

    def compose(self) -> None:
        self.draw_header()
        for section in self.preset.section_order:
            getattr(self, f"draw_{section}")()
        self.check_content()

    def check_content(self) -> None:
        advanced = self.flow.top - self.flow.y
        if self.rendered_entries == 0:
            logger.error(f"PDF generation failed ({self.preset.template_id.value}): no entries rendered")
            raise ContentInsufficientError(
                "Failed to generate PDF: insufficient content (none of the selected entries exist)"
            )
        if self.flow.page_index == 0 and advanced < MIN_CONTENT_ADVANCE:
            logger.error(f"PDF generation failed: cursor only advanced {advanced:.1f}pt")
            raise ContentInsufficientError("Failed to generate PDF: insufficient content")

    # ── primitives ──────────────────────────────────────────────────────

    def text_line(self, text: str, size: float, bold: bool = False,
                  color: RGB = BLACK, gap: float = 6.0) -> None:
        if not text or not text.strip():
            return
        self.flow.ensure_space(size + gap)
        face = self.preset.family.face(bold and self.style.use_bold)
        self.canvas.text(self.flow.left, self.flow.y, text, face, size, color)
        self.flow.advance(size + gap)

    def draw_lines(self, lines: List[Line], x: float, style: TextStyle,
                   color: RGB = BLACK) -> None:
        step = style.size + self.preset.line_gap
        for line in lines:
            self.flow.ensure_space(step)
            self.canvas.draw_line_tokens(line, x, self.flow.y, style, color)
            self.flow.advance(step)

    def centered(self, text: str, size: float, fontname: str, color: RGB = BLACK,
                 min_size: float = 7.0) -> float:
        """Draw one centred line, shrinking in half points until it fits."""
        width = self.flow.content_width
        measure = TextStyle(self.preset.family, size)
        w = measure.width(text, bold=fontname == self.preset.family.bold)
        while w > width and size > min_size:
            size -= 0.5
            w = measure.resized(size).width(text, bold=fontname == self.preset.family.bold)
        page_w = self.emitter.page_width
        self.canvas.text((page_w - w) / 2, self.flow.y, text, fontname, size, color)
        return size

    def section_title(self, title: str) -> None:
        preset = self.preset
        self.flow.ensure_space(preset.section_gap + self.title_size + preset.title_gap
                               + preset.rule_gap + self.body.size + preset.line_gap)
        self.flow.advance(preset.section_gap)
        label = title.upper()
        face = self.heading_face
        if preset.center_titles:
            w = TextStyle(preset.family, self.title_size).width(label, bold=face == preset.family.bold)
            x = (self.emitter.page_width - w) / 2
        else:
            x = self.flow.left
        self.canvas.text(x, self.flow.y, label, face, self.title_size, self.accent)
        self.flow.advance(self.title_size + preset.title_gap)
        self.canvas.line(self.flow.left, self.flow.y, self.flow.right, self.flow.y,
                         color=self.accent, width=preset.rule_width)
        self.flow.advance(preset.rule_gap)

    def entry_header(self, left: str, right: str = "", color: Optional[RGB] = None) -> None:
        """Left heading with a right-aligned date; the heading shrinks on collision."""
        color = self.accent if color is None else color
        size = self.fs
        right_size = max(self.fs - 1, 8)
        family = self.preset.family
        right_w = TextStyle(family, right_size).width(right) if right else 0.0
        left_w = TextStyle(family, size).width(left, bold=self.style.use_bold)
        if right and left_w + 20 + right_w > self.flow.content_width:
            size = max(self.fs - 2, 8)
        elif not right and left_w > self.flow.content_width:
            size = max(self.fs - 2, 8)

        gap = self.preset.line_gap + 2
        self.flow.ensure_space(size + gap)
        self.canvas.text(self.flow.left, self.flow.y, left, self.heading_face, size, color)
        if right:
            self.canvas.text(self.flow.right - right_w, self.flow.y, right,
                             family.regular, right_size, BLACK)
        self.flow.advance(size + gap)

    # ── bodies ──────────────────────────────────────────────────────────

    def draw_markdown(self, text: str, style: Optional[TextStyle] = None) -> None:
        """Markdown-aware paragraphs, justified except for each last line.

        A paragraph opening with a list marker becomes a bullet item with a
        hanging indent.
        """
        style = style or self.body
        width = self.flow.content_width
        for paragraph in (text or "").split("\n"):
            if not paragraph.strip():
                continue
            if _LEADING_LIST_MARKER.match(paragraph):
                item = _LEADING_LIST_MARKER.sub("", paragraph, count=1).strip()
                indent = self._marker_indent(style)
                lines = break_lines(tokenize(item), width - indent, style.measure, justify=True)
                self._draw_item(lines, style, indent)
                continue
            lines = break_lines(tokenize(paragraph.strip()), width, style.measure, justify=True)
            self.draw_lines(lines, self.flow.left, style)

    def draw_bullets(self, text: str, style: Optional[TextStyle] = None) -> None:
        style = style or self.body
        indent = self._marker_indent(style)
        for item in layout_bullets(text, style, self.flow.content_width, indent, justify=True):
            self._draw_item(item.lines, style, indent)

    def _marker_indent(self, style: TextStyle) -> float:
        glyph = self.preset.bullet_glyph
        if glyph:
            return bullet_indent(style, glyph)
        box = max(style.size * 0.22, 2.5)
        return box + max(style.size * 0.6, 5)

    def _draw_item(self, lines: List[Line], style: TextStyle, indent: float) -> None:
        step = style.size + self.preset.line_gap
        for i, line in enumerate(lines):
            self.flow.ensure_space(step)
            y = self.flow.y
            if i == 0:
                self._draw_marker(y, style, self.preset.bullet_glyph)
            self.canvas.draw_line_tokens(line, self.flow.left + indent, y, style)
            self.flow.advance(step)

    def _draw_marker(self, y: float, style: TextStyle, glyph: Optional[str]) -> None:
        if glyph == "•":
            self.canvas.bullet_dot(self.flow.left, y, style.size)
            return
        if glyph:
            self.canvas.text(self.flow.left, y, glyph, style.family.regular, style.size)
            return
        box = max(style.size * 0.22, 2.5)
        self.canvas.rect(self.flow.left, y + (style.size - box) / 2 - 1, box, box, fill=self.accent)

    def draw_body(self, text: str) -> None:
        if not text or not text.strip():
            return
        if has_markdown(text):
            self.draw_markdown(text)
        else:
            self.draw_bullets(text)

    # ── header ──────────────────────────────────────────────────────────

    def draw_header(self) -> None:
        name = self.profile.display_name
        contact = self.profile.contact.items()
        self.flow.ensure_space(self.name_size + 10)
        self.centered(name, self.name_size, self.heading_face, self.accent, min_size=self.fs)

        if self.preset.header == "centered-two-line":
            self.flow.advance(self.name_size + 8)
            c = self.profile.contact
            line1 = " • ".join(v for v in [c.preferred_email, c.phone] if v)
            line2 = " • ".join(v for v in [c.website, c.linkedin] if v)
            if line1:
                self.centered(line1, self.contact_size, self.preset.family.regular)
                self.flow.advance(self.contact_size + 4)
            if line2:
                self.centered(line2, self.contact_size, self.preset.family.regular)
                self.flow.advance(self.contact_size + 12)
            else:
                self.flow.advance(8)
            return

        self.flow.advance(self.name_size + 4)
        if contact:
            self.centered(" • ".join(contact), self.contact_size, self.preset.family.regular)
        self.flow.advance(self.contact_size + 10)

    # ── sections ────────────────────────────────────────────────────────

    def draw_education(self) -> None:
        edu = self.profile.education
        if edu.is_empty:
            return
        self.section_title("Education")
        self.entry_header(edu.school or "Institution", (edu.study_period or "").strip(), color=BLACK)
        if edu.major.strip():
            self.text_line(edu.major.strip(), self.fs - 1)
        self.flow.advance(self.preset.entry_gap)

    def draw_skills(self) -> None:
        skills = self.profile.skills
        if not skills:
            return
        self.section_title("Skills")
        if has_markdown(skills):
            self.draw_markdown(skills)
        else:
            for raw in skills.split("\n"):
                if not raw.strip():
                    continue
                lines = break_lines(plain_tokens(raw.strip()), self.flow.content_width,
                                    self.body.measure, justify=True)
                self.draw_lines(lines, self.flow.left, self.body)

        languages = (self.profile.languages or "").strip()
        if languages and languages != skills:
            label = TextStyle(self.preset.family, self.body.size, allow_bold=True)
            tokens = [Token("Language:", Emphasis.BOLD), Token(" ")] + plain_tokens(languages)
            lines = break_lines(tokens, self.flow.content_width, label.measure)
            self.draw_lines(lines, self.flow.left, label)

    def draw_experience(self) -> None:
        chosen = self.profile.chosen_experiences()
        if not chosen:
            return
        self.section_title("Experience")
        for idx, entry in chosen:
            logger.debug(f"Experience {idx}: {entry.company_name} ({len(entry.body)} chars)")
            self.entry_header(entry.heading or "Experience", entry.date_range)
            self.draw_body(entry.body)
            self.flow.advance(self.preset.entry_gap)
            self.rendered_entries += 1

    def draw_projects(self) -> None:
        chosen = self.profile.chosen_projects()
        if not chosen:
            return
        self.section_title("Projects")
        for idx, entry in chosen:
            logger.debug(f"Project {idx}: {entry.name} ({len(entry.body)} chars)")
            self.entry_header(entry.name or "Untitled Project")
            self.draw_body(entry.body)
            self.flow.advance(self.preset.entry_gap)
            self.rendered_entries += 1


class SidebarComposer(SectionComposer):
    """Serif layout with a shaded left sidebar for contact, skills and languages.

    The sidebar is drawn on the first page only and keeps its own cursor; the
    main column flows across pages independently.
    """

    SIDEBAR_X = 54.0
    SIDEBAR_WIDTH = 180.0
    GUTTER = 18.0
    TINT = (0.98, 0.98, 0.98)
    DIVIDER = (0.85, 0.85, 0.85)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.side_y = 0.0
        self.side_size = max(self.fs - 1, 9)
        self.side_item_size = max(self.fs - 2, 8)
        self._side_overflow = False

    @property
    def divider_x(self) -> float:
        return self.SIDEBAR_X + self.SIDEBAR_WIDTH + self.GUTTER / 2

    def _draw_divider(self, canvas: PdfCanvas) -> None:
        top = self.emitter.page_height - self.preset.margins.top
        canvas.line(self.divider_x, top, self.divider_x, self.preset.margins.bottom,
                    color=self.DIVIDER, width=0.5)

    def on_new_page(self, canvas: PdfCanvas) -> float:
        self._draw_divider(canvas)
        return 0.0

    def draw_header(self) -> None:
        page_h = self.emitter.page_height
        m = self.preset.margins.top
        top = page_h - m
        canvas = self.canvas

        canvas.rect(self.SIDEBAR_X - 6, m - 6, self.SIDEBAR_WIDTH + 12, page_h - 2 * m + 12,
                    fill=self.TINT)
        canvas.text(self.SIDEBAR_X, top, self.profile.display_name, self.preset.family.bold,
                    self.name_size, self.accent)

        c = self.profile.contact
        contact_top = " • ".join(v for v in [c.preferred_email, c.phone] if v)
        if contact_top:
            size = max(self.fs - 1, 9)
            w = TextStyle(self.preset.family, size).width(contact_top)
            canvas.text(self.flow.right - w, top, contact_top, self.preset.family.regular, size)

        y = top - (self.name_size + 6)
        canvas.line(self.SIDEBAR_X, y, self.flow.right, y, color=self.accent, width=1.0)
        y -= 12
        self._draw_divider(canvas)
        self.flow.y = y
        self.side_y = y
        self.draw_sidebar()

    # ── sidebar column ──────────────────────────────────────────────────

    def _side_room(self, height: float) -> bool:
        if self.side_y - height >= self.preset.margins.bottom:
            return True
        if not self._side_overflow:
            logger.warning("Sidebar content exceeds the first page; remaining items dropped")
            self._side_overflow = True
        return False

    def side_label(self, text: str) -> None:
        if not self._side_room(self.side_size + 6):
            return
        self.canvas.text(self.SIDEBAR_X, self.side_y, text.upper(), self.preset.family.bold,
                         self.side_size, self.accent)
        self.side_y -= self.side_size + 6

    def side_line(self, text: str, size: Optional[float] = None, bullet: bool = False) -> None:
        text = (text or "").strip()
        if not text:
            return
        size = size or self.side_size
        style = TextStyle(self.preset.family, size)
        indent = bullet_indent(style, "•") if bullet else 0.0
        max_w = self.SIDEBAR_WIDTH - 4 - indent
        if style.width(text) <= max_w:
            lines = [text]
        elif _looks_like_url(text):
            lines = wrap_chars(text, max_w, style.width)
        else:
            lines = wrap_plain(text, max_w, style.measure)
        for i, line in enumerate(lines):
            if not self._side_room(size + 4):
                return
            if bullet and i == 0:
                self.canvas.bullet_dot(self.SIDEBAR_X, self.side_y, size, self.accent)
            self.canvas.text(self.SIDEBAR_X + indent, self.side_y, line, self.preset.family.regular, size)
            self.side_y -= size + 4

    def side_rule(self) -> None:
        self.side_y -= 6
        if self._side_room(10):
            self.canvas.line(self.SIDEBAR_X, self.side_y, self.SIDEBAR_X + self.SIDEBAR_WIDTH,
                             self.side_y, color=self.DIVIDER, width=0.5)
        self.side_y -= 10

    def draw_sidebar(self) -> None:
        self.side_label("Contact")
        for item in self.profile.contact.items():
            self.side_line(item)
        self.side_rule()

        skills = self.profile.skills
        if skills:
            self.side_label("Skills")
            for token in _split_phrases(strip_markdown(skills)):
                self.side_line(token, self.side_item_size, bullet=True)
            self.side_rule()

        languages = (self.profile.languages or "").strip()
        if languages and languages != self.profile.skills:
            self.side_label("Languages")
            for lang in _split_phrases(languages):
                self.side_line(lang, self.side_item_size, bullet=True)
            self.side_rule()

    def draw_skills(self) -> None:
        # skills live in the sidebar
        return


def _split_phrases(text: str) -> List[str]:
    return [s.strip() for s in _SKILL_SPLIT.split(text or "") if s.strip()]


def _looks_like_url(text: str) -> bool:
    if re.match(r"^https?://", text):
        return True
    return not re.search(r"\s", text) and ("." in text or "/" in text)
