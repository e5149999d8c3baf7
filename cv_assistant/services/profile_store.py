"""
Profile store: persistence for the user's profile and conversion of a stored
profile into the renderer's ``ProfileDocument``.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from cv_assistant.db import models
from cv_assistant.schemas.profile import ProfileResponse, ProfileUpdate
from cv_assistant.services.enhancement import NO_ENHANCEMENTS, EnhancedContent
from cv_assistant.services.resume_pdf.document import (
    ContactInfo,
    Education,
    ExperienceEntry,
    ProfileDocument,
    ProjectEntry,
)

logger = logging.getLogger(__name__)


def get_profile(db: Session, user: models.User) -> Optional[models.Profile]:
    return db.query(models.Profile).filter(models.Profile.owner_id == user.id).first()


def to_schema(row: models.Profile) -> ProfileResponse:
    return ProfileResponse(
        name=row.name,
        email=row.email,
        work_email=row.work_email,
        phone=row.phone,
        website=row.website,
        linkedin=row.linkedin,
        school=row.school,
        major=row.major,
        study_period=row.study_period,
        skills=row.skills,
        languages=row.languages,
        projects=row.projects or [],
        experiences=row.experiences or [],
        updated_at=row.updated_at,
    )


def save_profile(db: Session, user: models.User, update: ProfileUpdate) -> models.Profile:
    row = get_profile(db, user)
    if row is None:
        row = models.Profile(owner_id=user.id)
        db.add(row)
        logger.info(f"Creating profile for user {user.id}")

    data = update.model_dump()
    for key, value in data.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row


def build_document(
    profile: ProfileResponse,
    selected_projects: List[int],
    selected_experiences: List[int],
    skills: Optional[str] = None,
    enhanced: EnhancedContent = NO_ENHANCEMENTS,
) -> ProfileDocument:
    """Merge a stored profile, request overrides and enhanced text into render input."""
    projects = tuple(
        ProjectEntry(
            name=p.name,
            body=enhanced.project_body(i, p.description or p.summary or ""),
        )
        for i, p in enumerate(profile.projects)
    )
    experiences = tuple(
        ExperienceEntry(
            company_name=e.company_name,
            role=e.role,
            time_from=e.time_from,
            time_to=e.time_to,
            body=enhanced.experience_body(i, e.description or e.summary or ""),
        )
        for i, e in enumerate(profile.experiences)
    )
    skills_text = (enhanced.skills or skills or profile.skills or "").strip()

    return ProfileDocument(
        name=profile.name or "",
        contact=ContactInfo(
            email=profile.email or "",
            work_email=profile.work_email,
            phone=profile.phone,
            website=profile.website,
            linkedin=profile.linkedin,
        ),
        education=Education(
            school=profile.school or "",
            major=profile.major or "",
            study_period=profile.study_period,
        ),
        skills_text=skills_text,
        languages=profile.languages,
        projects=projects,
        experiences=experiences,
        selected_projects=tuple(selected_projects),
        selected_experiences=tuple(selected_experiences),
    )
