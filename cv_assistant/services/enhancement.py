"""
Optional AI enhancement of résumé content before layout.

The result is an immutable mapping from entry index to rewritten text. The
renderer reads bodies through ``EnhancedContent.project_body`` /
``experience_body``, which apply the merge rule
``targeted -> general enhancement -> original``. Enhancement never blocks a
render: any upstream failure is logged and the affected entry keeps its
original text.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from cv_assistant.schemas.profile import ExperienceItem, ProjectItem
from cv_assistant.schemas.resume import QaMessage
from cv_assistant.services.resume_pdf.errors import UpstreamEnhancementError
from cv_assistant.services.resume_pdf.style import ContentDensity

logger = logging.getLogger(__name__)


def _frozen(data: Optional[Mapping] = None) -> Mapping:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class EnhancedContent:
    skills: Optional[str] = None
    projects: Mapping[int, str] = field(default_factory=_frozen)
    experiences: Mapping[int, str] = field(default_factory=_frozen)
    targeted: Mapping[str, str] = field(default_factory=_frozen)

    def project_body(self, idx: int, original: str) -> str:
        return self.targeted.get(f"project-{idx}") or self.projects.get(idx) or original

    def experience_body(self, idx: int, original: str) -> str:
        return self.targeted.get(f"experience-{idx}") or self.experiences.get(idx) or original


NO_ENHANCEMENTS = EnhancedContent()


def targeted_only(targeted: Optional[Dict[str, str]]) -> EnhancedContent:
    cleaned = {k: v for k, v in (targeted or {}).items() if isinstance(v, str) and v.strip()}
    return EnhancedContent(targeted=_frozen(cleaned))


def qa_notes(qa: Optional[List[QaMessage]]) -> str:
    if not qa:
        return ""
    lines = "\n".join(f"[{m.role}] {m.content}" for m in qa)
    return f"\nContext from Q&A (user and assistant messages):\n{lines}"


async def _apply_density(client, text: str, content_type: str, density: ContentDensity, notes: str) -> str:
    try:
        if density is ContentDensity.CONCISE:
            return await client.summarize(text, content_type)
        if density is ContentDensity.DETAILED:
            return await client.expand(text, content_type, notes)
    except UpstreamEnhancementError as e:
        logger.warning(f"Density pass ({density.value}) failed for {content_type}, keeping improved text: {e}")
    return text


async def build_enhancements(
    client,
    projects: List[ProjectItem],
    experiences: List[ExperienceItem],
    selected_projects: List[int],
    selected_experiences: List[int],
    skills: Optional[str] = None,
    qa: Optional[List[QaMessage]] = None,
    density: ContentDensity = ContentDensity.BALANCED,
    targeted: Optional[Dict[str, str]] = None,
) -> EnhancedContent:
    """Rewrite skills and each selected entry, sequentially, one call at a time."""
    notes = qa_notes(qa)
    enhanced_skills: Optional[str] = None
    project_text: Dict[int, str] = {}
    experience_text: Dict[int, str] = {}

    if skills and skills.strip():
        try:
            enhanced_skills = await client.rewrite_skills(skills, notes)
        except UpstreamEnhancementError as e:
            logger.warning(f"Skills enhancement failed, using original skills: {e}")

    for idx in selected_projects:
        if not 0 <= idx < len(projects):
            continue
        p = projects[idx]
        base = p.summary or p.description or ""
        if not base.strip():
            continue
        try:
            improved = await client.improve_bullets("project", f"Project name: {p.name}", base, notes)
        except UpstreamEnhancementError as e:
            logger.warning(f"Enhancement failed for project {idx}, using original: {e}")
            continue
        project_text[idx] = await _apply_density(client, improved, "project", density, notes)

    for idx in selected_experiences:
        if not 0 <= idx < len(experiences):
            continue
        ex = experiences[idx]
        base = ex.summary or ex.description or ""
        if not base.strip():
            continue
        heading = f"Company: {ex.company_name}\nRole: {ex.role}"
        try:
            improved = await client.improve_bullets("experience", heading, base, notes)
        except UpstreamEnhancementError as e:
            logger.warning(f"Enhancement failed for experience {idx}, using original: {e}")
            continue
        experience_text[idx] = await _apply_density(client, improved, "experience", density, notes)

    logger.info(
        f"Enhanced {len(project_text)}/{len(selected_projects)} projects, "
        f"{len(experience_text)}/{len(selected_experiences)} experiences"
    )
    cleaned_targeted = {k: v for k, v in (targeted or {}).items() if isinstance(v, str) and v.strip()}
    return EnhancedContent(
        skills=enhanced_skills,
        projects=_frozen(project_text),
        experiences=_frozen(experience_text),
        targeted=_frozen(cleaned_targeted),
    )
