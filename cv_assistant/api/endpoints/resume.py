"""
Résumé endpoints: render a profile to PDF in one of the templates, and
one-off content rewrites (expand, summarize, targeted enhancement, markdown
beautify) and free-text style preference parsing.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from typing import Any, Dict, List
import logging

from cv_assistant.api.deps import get_current_profile, get_llm, get_llm_handle
from cv_assistant.core.config import settings
from cv_assistant.llm.gemini_client import LLMHandle
from cv_assistant.schemas.profile import ProfileResponse
from cv_assistant.schemas.resume import (
    BeautifyRequest,
    BeautifyResponse,
    ContentRequest,
    ContentResponse,
    ResumeRenderRequest,
    StyleParseRequest,
    StyleParseResponse,
    StylePreferences,
    TargetedEnhanceRequest,
    TargetedEnhanceResponse,
)
from cv_assistant.services.enhancement import build_enhancements, targeted_only
from cv_assistant.services.profile_store import build_document
from cv_assistant.services.resume_pdf.document import ProfileDocument, validate_selection
from cv_assistant.services.resume_pdf.errors import RenderError, UpstreamEnhancementError
from cv_assistant.services.resume_pdf.markdown import has_markdown
from cv_assistant.services.resume_pdf.render import render_document
from cv_assistant.services.resume_pdf.style import FONT_SIZES, ContentDensity, StyleConfig, TemplateId

router = APIRouter()
logger = logging.getLogger(__name__)

STATUS_FOR_KIND = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "content_insufficient": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "emitter_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "upstream_enhancement": status.HTTP_502_BAD_GATEWAY,
}


def http_error(error: RenderError) -> HTTPException:
    code = STATUS_FOR_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=code, detail=error.to_dict())


def _require_content(content: str) -> str:
    if not content or not content.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid content")
    return content


@router.post("/enhance", response_model=ContentResponse)
async def enhance_content(request: ContentRequest, client=Depends(get_llm)):
    content = _require_content(request.content)
    try:
        enhanced = await client.expand(content, request.content_type, request.qa_context or "")
    except UpstreamEnhancementError as e:
        logger.error(f"Enhance failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to enhance content")
    return ContentResponse(content=enhanced, original_length=len(content), new_length=len(enhanced))


@router.post("/summarize", response_model=ContentResponse)
async def summarize_content(request: ContentRequest, client=Depends(get_llm)):
    content = _require_content(request.content)
    try:
        summary = await client.summarize(content, request.content_type)
    except UpstreamEnhancementError as e:
        logger.error(f"Summarize failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to summarize content")
    return ContentResponse(content=summary, original_length=len(content), new_length=len(summary))


@router.post("/enhance-targeted", response_model=TargetedEnhanceResponse)
async def enhance_targeted(request: TargetedEnhanceRequest, client=Depends(get_llm)):
    content = _require_content(request.original_content)
    prefs = request.user_preferences
    if prefs.format not in ("concise", "preserve", "enhance"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown format: {prefs.format}")
    try:
        enhanced = await client.enhance_targeted(
            request.item_type, request.item_name, content, prefs.format, prefs.modifications,
        )
    except UpstreamEnhancementError as e:
        logger.error(f"Targeted enhancement failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": "Failed to enhance content", "fallback": content},
        )
    return TargetedEnhanceResponse(
        enhanced_content=enhanced,
        item_type=request.item_type,
        item_name=request.item_name,
        original_length=len(content),
        enhanced_length=len(enhanced),
    )


@router.post("/beautify", response_model=BeautifyResponse)
async def beautify_content(request: BeautifyRequest, client=Depends(get_llm)):
    content = _require_content(request.content)
    prefs = request.style_preferences.model_dump() if request.style_preferences else {}
    try:
        formatted = await client.beautify(content, request.content_type, prefs)
    except UpstreamEnhancementError as e:
        logger.error(f"Beautify failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to beautify content")
    return BeautifyResponse(formatted_content=formatted, has_markdown=has_markdown(formatted))


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


def style_answer(data: Dict[str, Any]) -> StyleParseResponse:
    """Normalize the model's answer; anything unusable falls back to the defaults."""
    font_size = str(data.get("fontSize") or "11pt").lower().replace(" ", "")
    digits = font_size[:-2] if font_size.endswith("pt") else font_size
    if not digits.isdigit() or int(digits) not in FONT_SIZES:
        font_size = "11pt"
    else:
        font_size = f"{int(digits)}pt"

    density = data.get("contentDensity") or "balanced"
    if density not in {d.value for d in ContentDensity}:
        density = "balanced"

    notes = data.get("additionalNotes")
    return StyleParseResponse(
        font_size=font_size,
        use_bold=data.get("useBold") is True,
        use_italic=data.get("useItalic") is True,
        bold_sections=_string_list(data.get("boldSections")),
        italic_sections=_string_list(data.get("italicSections")),
        content_density=density,
        additional_notes=notes if isinstance(notes, str) else "",
    )


@router.post("/style-parser", response_model=StyleParseResponse)
async def parse_style(request: StyleParseRequest, client=Depends(get_llm)):
    answer = request.user_response
    if not answer or not answer.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user response")
    try:
        data = await client.parse_style_preferences(answer)
    except UpstreamEnhancementError as e:
        logger.error(f"Style preference parsing failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to parse style preferences")
    return style_answer(data)


@router.post("/{template}")
async def render_resume(
    template: str,
    request: ResumeRenderRequest,
    profile: ProfileResponse = Depends(get_current_profile),
    llm: LLMHandle = Depends(get_llm_handle),
):
    try:
        template_id = TemplateId(template)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "detail": f"Unknown template: {template}"},
        )

    prefs = request.style_preferences or StylePreferences()
    try:
        style = StyleConfig.from_preferences(
            font_size=prefs.font_size,
            use_bold=prefs.use_bold,
            use_italic=prefs.use_italic,
            accent_color=prefs.accent_color,
            content_density=prefs.content_density,
            template=template_id.value,
        )
        # reject bad selections before spending any LLM calls
        validate_selection(
            ProfileDocument(
                selected_projects=tuple(request.selected_projects),
                selected_experiences=tuple(request.selected_experiences),
            ),
            settings.MAX_SELECTED_ENTRIES,
        )
    except RenderError as e:
        raise http_error(e)

    enhanced = targeted_only(request.content_enhancement_data)
    if request.enhance:
        try:
            client = llm.get()
        except ValueError as e:
            logger.warning(f"Enhancement requested but LLM is not configured, rendering originals: {e}")
            client = None
        if client is not None:
            enhanced = await build_enhancements(
                client,
                profile.projects,
                profile.experiences,
                request.selected_projects,
                request.selected_experiences,
                skills=request.skills or profile.skills,
                qa=request.qa,
                density=style.content_density,
                targeted=request.content_enhancement_data,
            )

    document = build_document(
        profile,
        request.selected_projects,
        request.selected_experiences,
        skills=request.skills,
        enhanced=enhanced,
    )
    result = await run_in_threadpool(
        render_document, document, style, template_id,
        settings.MAX_SELECTED_ENTRIES, settings.MIN_PDF_BYTES,
    )
    if not result.ok:
        raise http_error(result.error)

    logger.info(f"Rendered {template_id.value} resume: {len(result.pdf_bytes)} bytes, {result.page_count} page(s)")
    return Response(
        content=result.pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": 'inline; filename="resume.pdf"',
            "X-Page-Count": str(result.page_count),
        },
    )
