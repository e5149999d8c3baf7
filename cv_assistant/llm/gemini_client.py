# File: cv_assistant/llm/gemini_client.py
"""Google Gemini REST client used for résumé text enhancement and cover letters.

Core methods: _send_request, _send_request_json. Convenience methods build the
prompts for bullet improvement, skills rewriting, summarizing, expanding,
targeted enhancement, cover letters and relevant-item selection.
"""
import asyncio
import json
import threading
import httpx
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from cv_assistant.core.config import settings
from cv_assistant.services.resume_pdf.errors import UpstreamEnhancementError

logger = logging.getLogger(__name__)

MAX_SELECTED_ITEMS = 6
MIN_PRO_THINKING_BUDGET = 128


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        pro_model: Optional[str] = None,
        lite_model: Optional[str] = None,
        timeout: Optional[float] = None,
        json_retries: Optional[int] = None,
    ):
        self.api_key = api_key or settings.GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY environment variable not set")

        self.model = model or settings.GEMINI_MODEL
        self.pro_model = pro_model or settings.GEMINI_PRO_MODEL
        self.lite_model = lite_model or settings.GEMINI_LITE_MODEL
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS
        self.json_retries = settings.LLM_JSON_RETRIES if json_retries is None else json_retries
        self.base_url = "https://generativelanguage.googleapis.com/v1beta"
        logger.info(f"Initialized GeminiClient with model: {self.model}, pro_model: {self.pro_model}")

    def _endpoint(self, model: str) -> str:
        return f"{self.base_url}/models/{model}:generateContent?key={self.api_key}"

    @staticmethod
    def _build_body(
        system_prompt: str, user_prompt: str, max_tokens: int = 8192, model: str = "",
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "contents": [
                {"role": "user", "parts": [{"text": user_prompt}]},
            ],
            "generationConfig": {
                "maxOutputTokens": max_tokens,
                "temperature": 0.7,
            },
        }
        # 3.x models require thinking; 2.5 pro cannot go below its minimum budget.
        # Everything else has thinking disabled so it doesn't eat maxOutputTokens.
        if model.startswith("gemini-3"):
            body["generationConfig"]["thinkingConfig"] = {"thinkingBudget": 8192}
        elif "2.5-pro" in model:
            body["generationConfig"]["thinkingConfig"] = {"thinkingBudget": MIN_PRO_THINKING_BUDGET}
            body["generationConfig"]["maxOutputTokens"] = max_tokens + MIN_PRO_THINKING_BUDGET
        else:
            body["generationConfig"]["thinkingConfig"] = {"thinkingBudget": 0}
        if system_prompt:
            body["systemInstruction"] = {"parts": [{"text": system_prompt}]}
        return body

    # ── Core methods ───────────────────────────────────────────────────────

    async def _send_request(
        self, system_prompt: str, user_prompt: str,
        max_tokens: int = 8192, model: str = None,
    ) -> str:
        use_model = model or self.model
        logger.info(f"Sending request to Gemini API with model: {use_model}")
        body = self._build_body(system_prompt, user_prompt, max_tokens, use_model)
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.post(
                    self._endpoint(use_model),
                    json=body,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logger.error(f"Error in Gemini API request: {e}")
            raise UpstreamEnhancementError(f"Gemini request failed: {e}")

        if resp.status_code != 200:
            logger.error(f"Gemini API failed {resp.status_code}: {resp.text[:500]}")
            raise UpstreamEnhancementError(f"Gemini API failed with status {resp.status_code}")

        try:
            text = _extract_text(resp.json()).strip()
        except (ValueError, AttributeError, TypeError, IndexError) as e:
            logger.error(f"Unreadable Gemini response: {resp.text[:500]}")
            raise UpstreamEnhancementError(f"Gemini returned an unreadable response: {e}")
        if not text:
            raise UpstreamEnhancementError("Gemini returned an empty response")
        logger.info(f"Received Gemini response (first 100 chars): {text[:100]}...")
        return text

    async def _send_request_json(
        self, system_prompt: str, user_prompt: str,
        max_tokens: int = 2048, model: str = None,
    ) -> Dict[str, Any]:
        """Ask for JSON and parse the outermost object, retrying on garbage."""
        last_error: Optional[Exception] = None
        for attempt in range(self.json_retries + 1):
            try:
                text = await self._send_request(system_prompt, user_prompt, max_tokens, model)
                return _parse_json_object(text)
            except (UpstreamEnhancementError, ValueError) as e:
                last_error = e
                logger.warning(f"[JSON] attempt {attempt + 1}/{self.json_retries + 1} failed: {e}")
        raise UpstreamEnhancementError(f"Failed to get valid JSON from Gemini: {last_error}")

    # ── Résumé content ─────────────────────────────────────────────────────

    async def improve_bullets(self, item_type: str, heading: str, base: str, qa_notes: str = "") -> str:
        extra = "Use quantified achievements when possible. " if item_type == "experience" else (
            "Keep content precise, factual, and ATS-friendly. "
        )
        prompt = (
            f"Improve these resume bullet points for a {item_type} in crisp, high-impact bullets "
            f"(2-3 bullets max). {extra}Return only bullets separated by newlines.{qa_notes}\n"
            f"{heading}\nBullets/summary to improve:\n{base}"
        )
        return await self._send_request("", prompt, max_tokens=1024)

    async def rewrite_skills(self, skills: str, qa_notes: str = "") -> str:
        prompt = (
            "Rewrite these skills as a concise comma-separated list, removing redundancy and "
            f"keeping professional tone.{qa_notes}\nSkills:\n{skills}"
        )
        return await self._send_request("", prompt, max_tokens=512)

    async def summarize(self, content: str, content_type: str = "content") -> str:
        prompt = f"""Summarize this {content_type} content to be approximately 50% shorter while maintaining all key achievements, metrics, and important details.

Rules:
- Keep quantified achievements (numbers, percentages, metrics)
- Preserve technologies and tools mentioned
- Maintain professional tone
- Focus on impact and results
- Remove redundant or less important details
- Keep bullet points concise and impactful

Original content:
{content}

Return only the summarized content, no explanations."""
        return await self._send_request("", prompt, max_tokens=1024, model=self.lite_model)

    async def expand(self, content: str, content_type: str = "content", qa_context: str = "") -> str:
        prompt = f"""Enhance this {content_type} content to be approximately 50% longer by adding relevant context, metrics, and achievements.

Rules:
- Keep every fact from the original; do not invent employers, titles or dates
- Add specific metrics and outcomes where they are implied
- Maintain professional, ATS-friendly tone
- Keep bullet points as bullet points{qa_context}

Original content:
{content}

Return only the enhanced content, no explanations."""
        return await self._send_request("", prompt, max_tokens=1536)

    async def enhance_targeted(
        self, item_type: str, item_name: str, content: str,
        format_preference: str = "preserve", modifications: str = "",
    ) -> str:
        prompt = f"""You are a professional resume writer. Enhance the following {item_type} content based on the user's preferences:

ITEM: {item_name}
ORIGINAL CONTENT: {content}

USER PREFERENCES:
- Format: {format_preference} (concise = shorter/focused, preserve = keep current length, enhance = expand with more context)
- Modifications: {modifications or "none"}

INSTRUCTIONS:
1. If format is "concise": Reduce content by ~50% while keeping key achievements and impact
2. If format is "preserve": Keep similar length but improve clarity and impact
3. If format is "enhance": Expand content by ~50% with more context, metrics, and achievements
4. Apply the specific modifications requested by the user
5. Use bullet points for better readability
6. Make it ATS-friendly and professional
7. Use **bold** for key achievements, metrics, and important terms
8. Return only the enhanced content, no explanations

Enhanced content:"""
        return await self._send_request("", prompt, max_tokens=1536)

    async def beautify(self, content: str, content_type: str = "content",
                       style_preferences: Optional[Dict[str, Any]] = None) -> str:
        """Insert **bold** / *italic* markers without rewording ``content``."""
        prompt = f"""Rewrite the following {content_type} content by PRESERVING all original facts and wording as much as possible and ONLY INSERTING Markdown emphasis markers:

STRICT RULES:
- Do NOT add new facts.
- Do NOT remove existing facts.
- Do NOT change names, dates, companies, metrics, or technologies.
- Keep original bullet structure and order.
- Only add Markdown emphasis: use **bold** for key achievements, metrics, and impact; use *italic* for technologies/tools/methodologies.
- Return ONLY the Markdown content, no commentary.

Style preferences: {json.dumps(style_preferences or {})}

Original content:
{content}"""
        return await self._send_request("", prompt, max_tokens=1536)

    async def parse_style_preferences(self, user_response: str) -> Dict[str, Any]:
        """Turn a free-text styling answer into a raw preferences object."""
        prompt = f"""Parse this user response about resume styling preferences and return a JSON object with these exact keys:

{{
  "fontSize": "10pt", "11pt" or "12pt",
  "useBold": true or false,
  "useItalic": true or false,
  "boldSections": ["array of section names to make bold"],
  "italicSections": ["array of section names to make italic"],
  "contentDensity": "concise" or "balanced" or "detailed",
  "additionalNotes": "any other styling preferences mentioned"
}}

User response: "{user_response}"

Return only the JSON object, no other text."""
        return await self._send_request_json("", prompt, max_tokens=512, model=self.lite_model)

    # ── Cover letters & selection ──────────────────────────────────────────

    async def generate_cover_letter(self, prompt: str) -> Tuple[str, Optional[str]]:
        """Primary model, one retry after a short pause, then the fast model.

        Returns ``(text, fallback)`` where ``fallback`` names the fallback
        model tier when it was needed.
        """
        for attempt in range(2):
            try:
                return await self._send_request("", prompt, max_tokens=2048, model=self.pro_model), None
            except UpstreamEnhancementError as e:
                logger.warning(f"Cover letter attempt {attempt + 1} on {self.pro_model} failed: {e}")
                if attempt == 0:
                    await asyncio.sleep(0.5)

        try:
            return await self._send_request("", prompt, max_tokens=2048, model=self.model), "flash"
        except UpstreamEnhancementError as e:
            logger.error(f"Cover letter generation failed on all models: {e}")
            raise UpstreamEnhancementError(
                "Cover letter generation temporarily unavailable. Please try again."
            )

    async def select_relevant_items(self, job_description: str, items: List[str]) -> List[int]:
        """Indices (into ``items``) of up to six entries relevant to the job."""
        listing = "\n".join(f"{i}. {item}" for i, item in enumerate(items))
        prompt = (
            "Given this job description, select the most relevant items (up to 6) from the "
            "user's profile summaries. Return JSON array of indices.\n"
            f"Job Description:\n{job_description}\n\nItems:\n{listing}\n\n"
            'Return only JSON like {"indices": [0,2,5]}'
        )
        try:
            data = await self._send_request_json("", prompt, max_tokens=256, model=self.lite_model)
        except UpstreamEnhancementError as e:
            logger.warning(f"Item selection failed, returning no suggestions: {e}")
            return []

        raw = data.get("indices")
        if not isinstance(raw, list):
            return []
        indices = []
        for value in raw:
            if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < len(items):
                if value not in indices:
                    indices.append(value)
        return indices[:MAX_SELECTED_ITEMS]


class LLMHandle:
    """Process-wide, lazily constructed client shared by request handlers."""

    def __init__(self, factory: Callable[[], Any] = GeminiClient):
        self._factory = factory
        self._client = None
        self._lock = threading.Lock()

    def get(self):
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = self._factory()
        return self._client


# ── Helpers ────────────────────────────────────────────────────────────────

def _extract_text(response_data: Dict) -> str:
    """Extract text from Gemini generateContent response."""
    candidates = response_data.get("candidates", [])
    if not candidates:
        raise UpstreamEnhancementError("Gemini returned no candidates")
    parts = candidates[0].get("content", {}).get("parts", [])
    # Skip thought parts (thinking models)
    return "".join(p.get("text", "") for p in parts if not p.get("thought"))


def _parse_json_object(text: str) -> Dict[str, Any]:
    start = text.find("{")
    end = text.rfind("}")
    candidate = text[start:end + 1] if start >= 0 and end > start else text
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e}")
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data
