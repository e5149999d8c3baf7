"""
Prompt assembly for cover letters and relevant-item selection.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from cv_assistant.schemas.profile import ProfileResponse


@dataclass(frozen=True)
class ProfileItem:
    kind: str  # "project" | "experience"
    index: int  # index within its own list
    name: str
    description: str
    summary: str

    def listing(self) -> str:
        return f"[{self.kind}] {self.name}: {self.summary or self.description}"


def profile_items(profile: ProfileResponse) -> List[ProfileItem]:
    """Projects first, then experiences; positions form the combined index space."""
    items = [
        ProfileItem("project", i, p.name, p.description or "", p.summary or "")
        for i, p in enumerate(profile.projects)
    ]
    items.extend(
        ProfileItem("experience", i, f"{e.company_name} - {e.role}", e.description or "", e.summary or "")
        for i, e in enumerate(profile.experiences)
    )
    return items


def split_indices(items: List[ProfileItem], indices: List[int]) -> Tuple[List[int], List[int]]:
    projects, experiences = [], []
    for i in indices:
        if 0 <= i < len(items):
            item = items[i]
            (projects if item.kind == "project" else experiences).append(item.index)
    return projects, experiences


def contact_block(profile: ProfileResponse) -> List[str]:
    lines = []
    if profile.name:
        lines.append(f"Name: {profile.name}")
    if profile.phone:
        lines.append(f"Phone: {profile.phone}")
    if profile.work_email or profile.email:
        lines.append(f"Email: {profile.work_email or profile.email}")
    if profile.website:
        lines.append(f"Website: {profile.website}")
    if profile.linkedin:
        lines.append(f"LinkedIn: {profile.linkedin}")
    if profile.languages:
        lines.append(f"Languages: {profile.languages}")
    return lines


def build_cover_letter_prompt(
    profile: ProfileResponse,
    company: str,
    job_description: str,
    indices: Optional[List[int]] = None,
) -> str:
    items = profile_items(profile)
    selected = [items[i] for i in (indices or []) if 0 <= i < len(items)] or items
    contact = "\n".join(contact_block(profile))
    relevant = "\n".join(f"- {item.listing()}" for item in selected)
    return f"""Write a professional, concise cover letter for {profile.name or 'the candidate'} applying to {company}.

CONTACT INFORMATION (include at the top):
{contact}

EDUCATION:
{profile.major or ''} at {profile.school or ''}

JOB DESCRIPTION:
{job_description}

RELEVANT EXPERIENCE & PROJECTS (leverage these with emphasis on impact):
{relevant}

INSTRUCTIONS:
- Format with proper greeting, 2-3 focused paragraphs, and professional closing
- Include the contact information at the top
- Leverage the relevant items to show specific value and impact
- Keep under 350 words
- No markdown, no comments; be specific and results-oriented
- Match the tone and style appropriate for the company and role"""
