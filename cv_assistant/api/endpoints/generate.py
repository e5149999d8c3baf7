"""
Generation endpoints: cover letters and job-relevant item suggestions.
"""

from fastapi import APIRouter, Depends, HTTPException, status
import logging

from cv_assistant.api.deps import get_current_profile, get_llm
from cv_assistant.schemas.profile import ProfileResponse
from cv_assistant.schemas.resume import (
    CoverLetterRequest,
    CoverLetterResponse,
    SelectRequest,
    SelectResponse,
)
from cv_assistant.services.cover_letter import build_cover_letter_prompt, profile_items, split_indices
from cv_assistant.services.resume_pdf.errors import UpstreamEnhancementError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/cover-letter", response_model=CoverLetterResponse)
async def generate_cover_letter(
    request: CoverLetterRequest,
    profile: ProfileResponse = Depends(get_current_profile),
    client=Depends(get_llm),
):
    if not request.company.strip() or not request.job_description.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing inputs")

    prompt = build_cover_letter_prompt(profile, request.company, request.job_description, request.indices)
    try:
        text, fallback = await client.generate_cover_letter(prompt)
    except UpstreamEnhancementError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return CoverLetterResponse(cover_letter=text.strip(), fallback=fallback)


@router.post("/select", response_model=SelectResponse)
async def select_items(
    request: SelectRequest,
    profile: ProfileResponse = Depends(get_current_profile),
    client=Depends(get_llm),
):
    if not request.job_description.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing job_description")

    items = profile_items(profile)
    listings = [item.listing() for item in items]
    indices = await client.select_relevant_items(request.job_description, listings) if items else []
    projects, experiences = split_indices(items, indices)
    logger.info(f"Suggested {len(indices)} of {len(items)} items")
    return SelectResponse(
        indices=indices,
        items=listings,
        selected_projects=projects,
        selected_experiences=experiences,
    )
