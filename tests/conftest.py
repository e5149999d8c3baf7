import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cv_assistant.services.resume_pdf.errors import UpstreamEnhancementError


class FakeLLM:
    """Stands in for GeminiClient; records calls and fails on request."""

    def __init__(self, fail=()):
        self.fail = set(fail)
        self.calls = []
        self.prompts = []
        self.style_answer = {"fontSize": "10pt", "useBold": True, "contentDensity": "concise"}

    async def _answer(self, name, result):
        self.calls.append(name)
        if name in self.fail:
            raise UpstreamEnhancementError(f"{name} failed")
        return result

    async def improve_bullets(self, item_type, heading, base, qa_notes=""):
        return await self._answer("improve_bullets", f"• improved {item_type} bullet")

    async def rewrite_skills(self, skills, qa_notes=""):
        return await self._answer("rewrite_skills", "Python, Go, SQL")

    async def summarize(self, content, content_type="content"):
        return await self._answer("summarize", "short version")

    async def expand(self, content, content_type="content", qa_context=""):
        return await self._answer("expand", f"longer version of {content}")

    async def enhance_targeted(self, item_type, item_name, content, format_preference="preserve", modifications=""):
        return await self._answer("enhance_targeted", f"**targeted** {item_name}")

    async def beautify(self, content, content_type="content", style_preferences=None):
        return await self._answer("beautify", content.replace("Designed", "**Designed**"))

    async def parse_style_preferences(self, user_response):
        return await self._answer("parse_style_preferences", dict(self.style_answer))

    async def generate_cover_letter(self, prompt):
        self.prompts.append(prompt)
        return await self._answer("generate_cover_letter", ("Dear hiring team,", None))

    async def select_relevant_items(self, job_description, items):
        return await self._answer("select_relevant_items", [2, 0])


@pytest.fixture
def fake_llm():
    return FakeLLM()
