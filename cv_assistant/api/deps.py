"""
Shared FastAPI dependencies: the lazily created LLM client and the current
user's stored profile.
"""

import logging
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from cv_assistant.core.auth import get_current_user
from cv_assistant.db import models
from cv_assistant.db.database import get_db
from cv_assistant.llm.gemini_client import LLMHandle
from cv_assistant.schemas.profile import ProfileResponse
from cv_assistant.services import profile_store

logger = logging.getLogger(__name__)


def get_llm_handle(request: Request) -> LLMHandle:
    return request.app.state.llm


def get_llm(handle: LLMHandle = Depends(get_llm_handle)):
    try:
        return handle.get()
    except ValueError as e:
        logger.error(f"LLM client unavailable: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


def get_current_profile(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    row = profile_store.get_profile(db, current_user)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "detail": "Profile not found"},
        )
    return profile_store.to_schema(row)
