"""
Profile endpoints: read and replace the user's résumé profile.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from cv_assistant.api.deps import get_current_profile
from cv_assistant.core.auth import get_current_user
from cv_assistant.db import models
from cv_assistant.db.database import get_db
from cv_assistant.schemas.profile import ProfileResponse, ProfileUpdate
from cv_assistant.services import profile_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=ProfileResponse)
async def get_profile(profile: ProfileResponse = Depends(get_current_profile)):
    return profile


@router.put("/", response_model=ProfileResponse)
async def update_profile(
    update: ProfileUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = profile_store.save_profile(db, current_user, update)
    logger.info(
        f"Saved profile for user {current_user.id}: "
        f"{len(update.projects)} projects, {len(update.experiences)} experiences"
    )
    return profile_store.to_schema(row)
