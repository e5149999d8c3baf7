"""
Résumé rendering entry point.

``render_document`` validates the selection, composes the chosen template
and emits the PDF. It never raises for expected failures: the caller gets a
``RenderResult`` carrying either the bytes or a ``RenderError``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from cv_assistant.services.resume_pdf.cardgrid import CardGridComposer
from cv_assistant.services.resume_pdf.composer import (
    CHRONOLOGICAL,
    HARVARD,
    SIDEBAR_SERIF,
    SectionComposer,
    SidebarComposer,
)
from cv_assistant.services.resume_pdf.document import (
    MAX_SELECTED_ENTRIES,
    ProfileDocument,
    validate_selection,
)
from cv_assistant.services.resume_pdf.emitter import MIN_PDF_BYTES, DocumentEmitter
from cv_assistant.services.resume_pdf.errors import EmitterError, RenderError
from cv_assistant.services.resume_pdf.style import StyleConfig, TemplateId

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    pdf_bytes: Optional[bytes] = None
    error: Optional[RenderError] = None
    page_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and self.pdf_bytes is not None


def build_composer(template: TemplateId, profile: ProfileDocument, style: StyleConfig,
                   emitter: DocumentEmitter):
    if template is TemplateId.HARVARD:
        return SectionComposer(profile, style, HARVARD, emitter)
    if template is TemplateId.CHRONOLOGICAL:
        return SectionComposer(profile, style, CHRONOLOGICAL, emitter)
    if template is TemplateId.SIDEBAR_SERIF:
        return SidebarComposer(profile, style, SIDEBAR_SERIF, emitter)
    if template is TemplateId.CARD_GRID:
        return CardGridComposer(profile, style, emitter)
    raise ValueError(f"Unknown template: {template}")


def render_document(
    profile: ProfileDocument,
    style: StyleConfig,
    template: Optional[TemplateId] = None,
    max_entries: int = MAX_SELECTED_ENTRIES,
    min_bytes: int = MIN_PDF_BYTES,
) -> RenderResult:
    """Render ``profile`` to PDF bytes with the given template and style."""
    template = template or style.template
    try:
        validate_selection(profile, max_entries)
    except RenderError as e:
        logger.warning(f"Rejected render request: {e.message}")
        return RenderResult(error=e)

    logger.info(
        f"Rendering {template.value} résumé for '{profile.display_name}' "
        f"({len(profile.selected_projects)} projects, {len(profile.selected_experiences)} experiences, "
        f"{style.font_size_pt}pt)"
    )

    emitter = DocumentEmitter(min_bytes=min_bytes)
    emitter.set_title(f"{profile.display_name} - Resume")
    try:
        build_composer(template, profile, style, emitter).compose()
        page_count = emitter.page_count
        data = emitter.emit()
    except RenderError as e:
        emitter.discard()
        logger.error(f"Rendering failed ({e.kind}): {e.message}")
        return RenderResult(error=e)
    except Exception as e:
        emitter.discard()
        logger.exception(f"Unexpected error while rendering {template.value} résumé")
        return RenderResult(error=EmitterError(f"Failed to generate PDF: {e}"))

    return RenderResult(pdf_bytes=data, page_count=page_count)
