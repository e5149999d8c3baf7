from pydantic import BaseModel
from typing import Dict, List, Optional


class StylePreferences(BaseModel):
    font_size: Optional[str] = "11pt"
    use_bold: Optional[bool] = True
    use_italic: Optional[bool] = False
    accent_color: Optional[str] = "black"
    content_density: Optional[str] = "balanced"


class QaMessage(BaseModel):
    role: str
    content: str


class ResumeRenderRequest(BaseModel):
    skills: Optional[str] = None
    selected_projects: List[int] = []
    selected_experiences: List[int] = []
    enhance: bool = False
    qa: Optional[List[QaMessage]] = None
    style_preferences: Optional[StylePreferences] = None
    # keys look like "project-0" / "experience-2"
    content_enhancement_data: Optional[Dict[str, str]] = None


class ContentRequest(BaseModel):
    content: str
    content_type: str = "content"
    qa_context: Optional[str] = None


class ContentResponse(BaseModel):
    content: str
    original_length: int
    new_length: int


class EnhancementPreferences(BaseModel):
    format: str = "preserve"  # concise | preserve | enhance
    modifications: str = ""


class TargetedEnhanceRequest(BaseModel):
    item_type: str
    item_name: str
    original_content: str
    user_preferences: EnhancementPreferences


class TargetedEnhanceResponse(BaseModel):
    enhanced_content: str
    item_type: str
    item_name: str
    original_length: int
    enhanced_length: int


class CoverLetterRequest(BaseModel):
    company: str
    job_description: str
    # indices into the combined list: projects first, then experiences
    indices: Optional[List[int]] = None


class CoverLetterResponse(BaseModel):
    cover_letter: str
    fallback: Optional[str] = None


class SelectRequest(BaseModel):
    job_description: str


class SelectResponse(BaseModel):
    indices: List[int]
    items: List[str]
    selected_projects: List[int]
    selected_experiences: List[int]


class BeautifyRequest(BaseModel):
    content: str
    content_type: str = "content"
    style_preferences: Optional[StylePreferences] = None


class BeautifyResponse(BaseModel):
    formatted_content: str
    has_markdown: bool


class StyleParseRequest(BaseModel):
    user_response: str


class StyleParseResponse(BaseModel):
    font_size: str = "11pt"
    use_bold: bool = False
    use_italic: bool = False
    bold_sections: List[str] = []
    italic_sections: List[str] = []
    content_density: str = "balanced"
    additional_notes: str = ""
