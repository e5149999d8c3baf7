"""End-to-end rendering through render_document."""

import os
import sys

import fitz
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cv_assistant.services.resume_pdf.document import (
    ContactInfo,
    Education,
    ExperienceEntry,
    ProfileDocument,
    ProjectEntry,
)
from cv_assistant.services.resume_pdf.errors import (
    ContentInsufficientError,
    ValidationError,
)
from cv_assistant.services.resume_pdf.render import render_document
from cv_assistant.services.resume_pdf.style import AccentColor, StyleConfig, TemplateId

ALL_TEMPLATES = list(TemplateId)

WORDS = (
    "alpha bravo charlie delta echo foxtrot golf hotel india juliet kilo lima "
    "mike november oscar papa quebec romeo sierra tango uniform victor whiskey yankee"
).split()


def long_text(n_words: int) -> str:
    return " ".join(WORDS[i % len(WORDS)] for i in range(n_words))


def bullet_text(n_bullets: int, words_each: int) -> str:
    words = long_text(n_bullets * words_each).split()
    return "\n".join(
        "• " + " ".join(words[i:i + words_each]) for i in range(0, len(words), words_each)
    )


def make_profile(**overrides) -> ProfileDocument:
    base = dict(
        name="Ada Lovelace",
        contact=ContactInfo(
            email="ada@example.com",
            phone="+44 20 7946 0000",
            website="https://ada.example.com",
            linkedin="linkedin.com/in/ada",
        ),
        education=Education(school="University of London", major="Mathematics", study_period="1832 - 1835"),
        skills_text="Python, Analytical Engines, **Numerical Methods**",
        projects=(
            ProjectEntry("Difference Engine Notes", "• Wrote the first published algorithm\n• Annotated the translation"),
            ProjectEntry("Loom Cards", "Designed punched card sequences for pattern weaving."),
        ),
        experiences=(
            ExperienceEntry("Babbage & Co", "Analyst", "1840", "1843", "- Modelled Bernoulli numbers\n- Reviewed designs"),
        ),
        selected_projects=(0,),
        selected_experiences=(),
    )
    base.update(overrides)
    return ProfileDocument(**base)


def pdf_pages_text(data: bytes):
    doc = fitz.open(stream=data, filetype="pdf")
    texts = [page.get_text() for page in doc]
    doc.close()
    return texts


class TestMinimalRender:
    def test_single_project(self):
        profile = make_profile(education=Education(), skills_text="")
        result = render_document(profile, StyleConfig())
        assert result.ok, result.error
        assert len(result.pdf_bytes) > 1000
        assert result.pdf_bytes.startswith(b"%PDF")
        assert result.page_count == 1

        text = pdf_pages_text(result.pdf_bytes)[0]
        assert "Ada Lovelace" in text
        assert "PROJECTS" in text
        assert "EXPERIENCE" not in text

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.value)
    def test_every_template_renders(self, template):
        profile = make_profile(selected_projects=(0, 1), selected_experiences=(0,))
        result = render_document(profile, StyleConfig(template=template))
        assert result.ok, result.error
        assert result.page_count >= 1
        assert len(result.pdf_bytes) > 1000
        text = "".join(pdf_pages_text(result.pdf_bytes))
        assert "Ada Lovelace" in text

    @pytest.mark.parametrize("size", [8, 9, 10, 11, 12, 14])
    def test_every_font_size(self, size):
        profile = make_profile(selected_experiences=(0,))
        result = render_document(profile, StyleConfig(font_size_pt=size, accent_color=AccentColor.CRIMSON))
        assert result.ok, result.error

    def test_template_argument_overrides_style(self):
        result = render_document(make_profile(), StyleConfig(), TemplateId.SIDEBAR_SERIF)
        assert result.ok, result.error
        text = pdf_pages_text(result.pdf_bytes)[0]
        assert "CONTACT" in text

    def test_selection_order_is_render_order(self):
        profile = make_profile(selected_projects=(1, 0))
        result = render_document(profile, StyleConfig())
        text = pdf_pages_text(result.pdf_bytes)[0]
        assert text.index("Loom Cards") < text.index("Difference Engine Notes")

    def test_markdown_body_drops_delimiters(self):
        profile = make_profile(
            projects=(ProjectEntry("Engine", "**Led** a team of *five* engineers"),),
        )
        result = render_document(profile, StyleConfig())
        assert result.ok, result.error
        text = pdf_pages_text(result.pdf_bytes)[0]
        assert "Led" in text
        assert "**" not in text

    def test_no_bold_still_renders(self):
        result = render_document(make_profile(), StyleConfig(use_bold=False))
        assert result.ok, result.error


class TestPagination:
    def test_long_body_overflows_with_single_section_header(self):
        profile = make_profile(
            projects=(ProjectEntry("Big Project", bullet_text(50, 10)),),
            education=Education(),
            skills_text="",
        )
        result = render_document(profile, StyleConfig())
        assert result.ok, result.error
        assert result.page_count >= 2

        pages = pdf_pages_text(result.pdf_bytes)
        assert "PROJECTS" in pages[0]
        assert sum(p.count("PROJECTS") for p in pages) == 1

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.value)
    def test_many_long_entries_paginate(self, template):
        projects = tuple(ProjectEntry(f"Project {i}", long_text(150)) for i in range(4))
        experiences = tuple(
            ExperienceEntry(f"Company {i}", "Engineer", "2020", "2021", long_text(150)) for i in range(3)
        )
        profile = make_profile(
            projects=projects,
            experiences=experiences,
            selected_projects=(0, 1, 2, 3),
            selected_experiences=(0, 1, 2),
        )
        result = render_document(profile, StyleConfig(template=template))
        assert result.ok, result.error
        assert result.page_count >= 2

    def test_card_grid_repeats_compact_header(self):
        projects = tuple(ProjectEntry(f"Project {i}", long_text(180)) for i in range(6))
        profile = make_profile(projects=projects, selected_projects=tuple(range(6)))
        result = render_document(profile, StyleConfig(template=TemplateId.CARD_GRID))
        assert result.ok, result.error
        pages = pdf_pages_text(result.pdf_bytes)
        assert len(pages) >= 2
        assert "Ada Lovelace" in pages[1]
        assert "Mathematics" in pages[1]


class TestSelectionRules:
    def test_over_limit_is_rejected(self):
        projects = tuple(ProjectEntry(f"P{i}", "text") for i in range(5))
        experiences = tuple(ExperienceEntry(f"C{i}", "Role", "", "", "text") for i in range(3))
        profile = make_profile(
            projects=projects,
            experiences=experiences,
            selected_projects=(0, 1, 2, 3, 4),
            selected_experiences=(0, 1, 2),
        )
        result = render_document(profile, StyleConfig())
        assert not result.ok
        assert isinstance(result.error, ValidationError)
        assert result.pdf_bytes is None
        assert result.page_count == 0

    def test_zero_selected_is_rejected(self):
        result = render_document(make_profile(selected_projects=()), StyleConfig())
        assert isinstance(result.error, ValidationError)

    @pytest.mark.parametrize("selected", [(-1,), (0, 0), ("0",), (True,)])
    def test_malformed_indices(self, selected):
        result = render_document(make_profile(selected_projects=selected), StyleConfig())
        assert isinstance(result.error, ValidationError)

    def test_out_of_range_index_is_skipped(self):
        result = render_document(make_profile(selected_projects=(0, 9)), StyleConfig())
        assert result.ok, result.error

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.value)
    def test_nothing_renderable_is_insufficient(self, template):
        profile = make_profile(selected_projects=(7,))
        result = render_document(profile, StyleConfig(template=template))
        assert isinstance(result.error, ContentInsufficientError)
        assert result.error.to_dict()["error"] == "content_insufficient"

    def test_custom_limit(self):
        profile = make_profile(selected_projects=(0, 1))
        result = render_document(profile, StyleConfig(), max_entries=1)
        assert isinstance(result.error, ValidationError)


class TestStyleConfig:
    def test_rejects_unsupported_size(self):
        with pytest.raises(ValidationError):
            StyleConfig(font_size_pt=13)

    def test_from_preferences(self):
        style = StyleConfig.from_preferences(font_size="10pt", accent_color="dark-blue", template="card-grid")
        assert style.font_size_pt == 10
        assert style.accent_color is AccentColor.DARK_BLUE
        assert style.template is TemplateId.CARD_GRID
        assert style.use_bold

    @pytest.mark.parametrize("kwargs", [{"accent_color": "neon"}, {"font_size": "big"}, {"template": "fancy"}])
    def test_from_preferences_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            StyleConfig.from_preferences(**kwargs)

    def test_palette_variants(self):
        palette = StyleConfig(accent_color=AccentColor.DARK_BLUE).palette
        assert palette.dark == pytest.approx((0.075, 0.15, 0.375))
        assert palette.light == pytest.approx((0.64, 0.68, 0.8))


def numbered_words(n_words: int):
    return [f"{WORDS[i % len(WORDS)]}{i}" for i in range(n_words)]


def visible_words(data: bytes):
    """Words PyMuPDF can extract inside the page bounds, across all pages."""
    doc = fitz.open(stream=data, filetype="pdf")
    words = [w[4] for page in doc for w in page.get_text("words")]
    doc.close()
    return words


class TestLongExperience:
    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.value)
    def test_five_hundred_plain_words_paginate_without_loss(self, template):
        body_words = numbered_words(500)
        profile = make_profile(
            experiences=(ExperienceEntry("Initech", "Engineer", "2019", "2024", " ".join(body_words)),),
            selected_projects=(),
            selected_experiences=(0,),
        )
        result = render_document(profile, StyleConfig(font_size_pt=11, template=template))
        assert result.ok, result.error
        assert result.page_count >= 2

        pages = pdf_pages_text(result.pdf_bytes)
        if template is not TemplateId.CARD_GRID:
            assert sum(p.count("EXPERIENCE") for p in pages) == 1
        assert sum(p.count("Initech") for p in pages) == 1

        visible = set(visible_words(result.pdf_bytes))
        missing = [w for w in body_words if w not in visible]
        assert missing == []


class TestBulletMarkers:
    def test_round_bullets_are_drawn_not_typed(self):
        result = render_document(make_profile(), StyleConfig(template=TemplateId.HARVARD))
        assert result.ok, result.error
        doc = fitz.open(stream=result.pdf_bytes, filetype="pdf")
        page = doc[0]
        lines = page.get_text().splitlines()
        curves = [item for d in page.get_drawings() for item in d["items"] if item[0] == "c"]
        doc.close()
        assert not any(line.strip().startswith("·") for line in lines)
        assert any("Wrote the first published algorithm" in line for line in lines)
        assert curves

    def test_italic_preference_still_renders(self):
        profile = make_profile(projects=(ProjectEntry("Engine", "Built an *analytical* engine"),))
        result = render_document(profile, StyleConfig(use_italic=True))
        assert result.ok, result.error
        assert "analytical" in pdf_pages_text(result.pdf_bytes)[0]
