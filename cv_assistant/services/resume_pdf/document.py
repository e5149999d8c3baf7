"""
Rendering input: the profile to lay out and which entries were selected.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from cv_assistant.services.resume_pdf.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_SELECTED_ENTRIES = 7


@dataclass(frozen=True)
class ContactInfo:
    email: str = ""
    work_email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None

    @property
    def preferred_email(self) -> str:
        if self.work_email and self.work_email.strip():
            return self.work_email.strip()
        return (self.email or "").strip()

    def items(self) -> List[str]:
        values = [self.preferred_email, self.phone, self.website, self.linkedin]
        return [v.strip() for v in values if v and v.strip()]


@dataclass(frozen=True)
class Education:
    school: str = ""
    major: str = ""
    study_period: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.school.strip() or self.major.strip())


@dataclass(frozen=True)
class ProjectEntry:
    name: str
    body: str = ""


@dataclass(frozen=True)
class ExperienceEntry:
    company_name: str
    role: str = ""
    time_from: str = ""
    time_to: str = ""
    body: str = ""

    @property
    def heading(self) -> str:
        return f"{self.company_name} — {self.role}".strip(" —")

    @property
    def date_range(self) -> str:
        if not (self.time_from.strip() or self.time_to.strip()):
            return ""
        return f"{self.time_from.strip()} - {self.time_to.strip()}".strip(" -")


@dataclass(frozen=True)
class ProfileDocument:
    name: str = ""
    contact: ContactInfo = field(default_factory=ContactInfo)
    education: Education = field(default_factory=Education)
    skills_text: str = ""
    languages: Optional[str] = None
    projects: Tuple[ProjectEntry, ...] = ()
    experiences: Tuple[ExperienceEntry, ...] = ()
    selected_projects: Tuple[int, ...] = ()
    selected_experiences: Tuple[int, ...] = ()

    @property
    def display_name(self) -> str:
        return self.name.strip() or "Your Name"

    @property
    def skills(self) -> str:
        """Skills text, falling back to the languages field."""
        return self.skills_text.strip() or (self.languages or "").strip()

    def chosen_projects(self) -> List[Tuple[int, ProjectEntry]]:
        return _pick(self.projects, self.selected_projects, "project")

    def chosen_experiences(self) -> List[Tuple[int, ExperienceEntry]]:
        return _pick(self.experiences, self.selected_experiences, "experience")


def _pick(entries, indices, label: str):
    chosen = []
    for idx in indices:
        if idx >= len(entries):
            logger.warning(f"Skipping out-of-range {label} index {idx} (have {len(entries)})")
            continue
        chosen.append((idx, entries[idx]))
    return chosen


def _check_indices(indices, label: str) -> None:
    seen = set()
    for idx in indices:
        if isinstance(idx, bool) or not isinstance(idx, int):
            raise ValidationError(f"Invalid {label} index {idx!r}: indices must be integers")
        if idx < 0:
            raise ValidationError(f"Invalid {label} index {idx}: indices must not be negative")
        if idx in seen:
            raise ValidationError(f"Duplicate {label} index {idx}")
        seen.add(idx)


def validate_selection(profile: ProfileDocument, limit: int = MAX_SELECTED_ENTRIES) -> None:
    """Reject bad selections before any rendering work starts."""
    _check_indices(profile.selected_projects, "project")
    _check_indices(profile.selected_experiences, "experience")

    total = len(profile.selected_projects) + len(profile.selected_experiences)
    if total > limit:
        raise ValidationError(
            f"Too many items selected: {total} (maximum {limit} projects and experiences combined)"
        )
    if total == 0:
        raise ValidationError("Please select at least one project or experience")
