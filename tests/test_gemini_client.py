"""Gemini client behaviour, with the network replaced by httpx mock transports."""

import asyncio
import json
import os
import sys
import threading

import httpx
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cv_assistant.llm.gemini_client import GeminiClient, LLMHandle, _parse_json_object
from cv_assistant.schemas.profile import ProjectItem
from cv_assistant.services.enhancement import build_enhancements
from cv_assistant.services.resume_pdf.errors import UpstreamEnhancementError


def make_client(responses, json_retries=2):
    """Client whose _send_request replays ``responses`` (str or Exception)."""
    client = GeminiClient(api_key="test-key", json_retries=json_retries)
    seen = []

    async def fake_send(system_prompt, user_prompt, max_tokens=8192, model=None):
        seen.append(model)
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    client._send_request = fake_send
    return client, seen


class TestParseJson:
    def test_extracts_object_from_chatter(self):
        assert _parse_json_object('Sure! {"indices": [1, 2]} Done.') == {"indices": [1, 2]}

    @pytest.mark.parametrize("text", ["no json here", "[1, 2]", "{broken"])
    def test_rejects_garbage(self, text):
        with pytest.raises(ValueError):
            _parse_json_object(text)


class TestGeminiClient:
    def test_requires_api_key(self, monkeypatch):
        from cv_assistant.core.config import settings
        monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
        with pytest.raises(ValueError):
            GeminiClient()

    def test_json_retries_then_succeeds(self):
        client, seen = make_client(["garbage", "still garbage", '{"indices": [0]}'])
        assert asyncio.run(client._send_request_json("", "prompt")) == {"indices": [0]}
        assert len(seen) == 3

    def test_json_retries_are_capped(self):
        client, seen = make_client(["x", "y", "z", '{"ok": 1}'], json_retries=2)
        with pytest.raises(UpstreamEnhancementError):
            asyncio.run(client._send_request_json("", "prompt"))
        assert len(seen) == 3

    def test_select_filters_and_caps_indices(self):
        payload = '{"indices": [9, 0, 0, "1", 2, 3, 4, 5, 6, 7, 8]}'
        client, _ = make_client([payload])
        items = [f"item {i}" for i in range(9)]
        assert asyncio.run(client.select_relevant_items("job", items)) == [0, 2, 3, 4, 5, 6]

    def test_select_failure_returns_empty(self):
        client, _ = make_client(["nope", "nope", "nope"])
        assert asyncio.run(client.select_relevant_items("job", ["a"])) == []

    def test_cover_letter_falls_back_to_flash(self):
        client, seen = make_client([
            UpstreamEnhancementError("pro down"),
            UpstreamEnhancementError("pro still down"),
            "Dear team,",
        ])
        text, fallback = asyncio.run(client.generate_cover_letter("prompt"))
        assert text == "Dear team,"
        assert fallback == "flash"
        assert seen == [client.pro_model, client.pro_model, client.model]

    def test_cover_letter_all_models_fail(self):
        client, _ = make_client([UpstreamEnhancementError("down")] * 3)
        with pytest.raises(UpstreamEnhancementError):
            asyncio.run(client.generate_cover_letter("prompt"))


class TestLLMHandle:
    def test_constructs_once(self):
        created = []

        def factory():
            created.append(1)
            return object()

        handle = LLMHandle(factory)
        results = []
        threads = [threading.Thread(target=lambda: results.append(handle.get())) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(created) == 1
        assert all(r is results[0] for r in results)

    def test_factory_errors_propagate(self):
        def factory():
            raise ValueError("GEMINI_API_KEY environment variable not set")

        with pytest.raises(ValueError):
            LLMHandle(factory).get()


def mock_transport(monkeypatch, handler):
    """Route every httpx.AsyncClient created by the client through ``handler``."""
    real_client = httpx.AsyncClient

    def factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", factory)


def gemini_payload(*parts):
    return {"candidates": [{"content": {"parts": list(parts)}}]}


class TestSendRequest:
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>proxy error</html>"),
            httpx.Response(200, json=["not", "an", "object"]),
            httpx.Response(200, json={"candidates": [{"content": "oops"}]}),
            httpx.Response(200, json={"candidates": []}),
            httpx.Response(500, text="internal error"),
            httpx.Response(200, json=gemini_payload({"text": "   "})),
        ],
        ids=["html", "list", "malformed-content", "no-candidates", "status-500", "blank"],
    )
    def test_bad_responses_raise_upstream_error(self, monkeypatch, response):
        mock_transport(monkeypatch, lambda request: response)
        client = GeminiClient(api_key="test-key")
        with pytest.raises(UpstreamEnhancementError):
            asyncio.run(client._send_request("", "hello"))

    def test_thought_parts_are_skipped(self, monkeypatch):
        payload = gemini_payload({"text": "thinking...", "thought": True}, {"text": "Answer"})
        mock_transport(monkeypatch, lambda request: httpx.Response(200, json=payload))
        client = GeminiClient(api_key="test-key")
        assert asyncio.run(client._send_request("", "hello")) == "Answer"

    def test_request_disables_thinking_on_flash(self, monkeypatch):
        sent = []

        def handler(request):
            sent.append(json.loads(request.content))
            return httpx.Response(200, json=gemini_payload({"text": "ok"}))

        mock_transport(monkeypatch, handler)
        client = GeminiClient(api_key="test-key", model="gemini-2.5-flash")
        asyncio.run(client._send_request("", "hello", max_tokens=1024))
        config = sent[0]["generationConfig"]
        assert config["thinkingConfig"] == {"thinkingBudget": 0}
        assert config["maxOutputTokens"] == 1024

    def test_non_json_body_falls_back_to_original_text(self, monkeypatch):
        mock_transport(monkeypatch, lambda request: httpx.Response(200, text="<html>proxy error</html>"))
        client = GeminiClient(api_key="test-key")
        projects = [ProjectItem(name="Compiler", description="Wrote a compiler")]
        enhanced = asyncio.run(build_enhancements(client, projects, [], [0], []))
        assert enhanced.project_body(0, "Wrote a compiler") == "Wrote a compiler"


class TestBuildBody:
    @pytest.mark.parametrize(
        "model, budget",
        [("gemini-2.5-flash", 0), ("gemini-2.5-flash-lite", 0), ("gemini-2.5-pro", 128), ("gemini-3-pro", 8192)],
    )
    def test_thinking_budget(self, model, budget):
        body = GeminiClient._build_body("", "hi", 1024, model)
        assert body["generationConfig"]["thinkingConfig"] == {"thinkingBudget": budget}

    def test_pro_budget_does_not_eat_output_tokens(self):
        body = GeminiClient._build_body("", "hi", 1024, "gemini-2.5-pro")
        assert body["generationConfig"]["maxOutputTokens"] == 1024 + 128

    def test_system_prompt(self):
        body = GeminiClient._build_body("be terse", "hi", 1024, "gemini-2.5-flash")
        assert body["systemInstruction"] == {"parts": [{"text": "be terse"}]}
