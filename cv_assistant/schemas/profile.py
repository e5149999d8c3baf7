from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class ProjectItem(BaseModel):
    name: str = ""
    description: str = ""
    summary: Optional[str] = None


class ExperienceItem(BaseModel):
    company_name: str = ""
    role: str = ""
    time_from: str = ""
    time_to: str = ""
    description: str = ""
    summary: Optional[str] = None


class ProfileUpdate(BaseModel):
    """PUT payload; replaces the stored profile."""
    name: Optional[str] = None
    email: Optional[str] = None
    work_email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    school: Optional[str] = None
    major: Optional[str] = None
    study_period: Optional[str] = None
    skills: Optional[str] = None
    languages: Optional[str] = None
    projects: List[ProjectItem] = []
    experiences: List[ExperienceItem] = []


class ProfileResponse(ProfileUpdate):
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
