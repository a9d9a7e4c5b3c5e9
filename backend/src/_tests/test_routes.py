# _tests/test_routes.py
from __future__ import annotations
import json
from typing import Any, Dict, List

import pytest
import requests
from fastapi.testclient import TestClient

from backend.src.api import routes_images
from backend.src.api.app import app
from backend.src.core.constants import FALLBACK_GOOGLE_API_KEY, IMAGE_MODEL
from backend.src.llm import gemini_llm
from backend.src.tools.web import inspiration_tool, knowledge_tool

from conftest import png_b64


class FakeResponse:
    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self.text = json.dumps(body) if not isinstance(body, str) else body
        self._body = body

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if isinstance(self._body, str):
            raise ValueError("not json")
        return self._body


def gemini_image(b64: str, mime: str = "image/png") -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": "here"}, {"inlineData": {"data": b64, "mimeType": mime}}]}}]}


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def gemini(monkeypatch):
    calls: List[Dict[str, Any]] = []
    replies: List[FakeResponse] = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        return replies.pop(0)

    monkeypatch.setattr(gemini_llm.requests, "post", fake_post)
    return calls, replies


def test_generate_returns_data_url_and_size(client, gemini, monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    calls, replies = gemini
    replies.append(FakeResponse(200, gemini_image(png_b64(6, 4))))
    r = client.post("/images/generate", json={"provider": "google-gemini", "mode": "generate", "prompt": "banana"})
    assert r.status_code == 200
    assert r.json() == {"dataUrl": f"data:image/png;base64,{png_b64(6, 4)}", "width": 6, "height": 4}
    assert calls[0]["url"].endswith(f"/{IMAGE_MODEL}:generateContent")
    assert calls[0]["headers"]["x-goog-api-key"] == "test-key"
    assert calls[0]["json"]["contents"][0]["parts"] == [{"text": "banana"}]


def test_generate_falls_back_to_placeholder_key(client, gemini, monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY_FALLBACK", raising=False)
    calls, replies = gemini
    replies.append(FakeResponse(200, gemini_image(png_b64())))
    client.post("/images/generate", json={"prompt": "banana"})
    assert calls[0]["headers"]["x-goog-api-key"] == FALLBACK_GOOGLE_API_KEY


def test_edit_sends_reference_first(client, gemini):
    calls, replies = gemini
    replies.append(FakeResponse(200, gemini_image(png_b64())))
    r = client.post("/images/generate", json={
        "mode": "edit",
        "prompt": "banana",
        "editPrompt": "peel it",
        "reference": {"base64": "QUJD", "mimeType": "image/jpeg"},
    })
    assert r.status_code == 200
    assert calls[0]["json"]["contents"][0]["parts"] == [
        {"inlineData": {"data": "QUJD", "mimeType": "image/jpeg"}},
        {"text": "peel it"},
    ]


def test_edit_without_reference_is_rejected(client, gemini):
    calls, _ = gemini
    r = client.post("/images/generate", json={"mode": "edit", "prompt": "peel it"})
    assert r.status_code == 400
    assert "reference" in r.json()["error"]
    assert calls == []


def test_invalid_body_is_400(client, gemini):
    r = client.post("/images/generate", json={"provider": "dall-e", "prompt": ""})
    assert r.status_code == 400
    assert "error" in r.json()


def test_provider_error_status_and_message_propagate(client, gemini):
    _, replies = gemini
    replies.append(FakeResponse(403, {"error": {"message": "API key not valid."}}))
    r = client.post("/images/generate", json={"prompt": "banana"})
    assert r.status_code == 403
    assert r.json() == {"error": "API key not valid."}


def test_provider_without_inline_image_is_502(client, gemini):
    _, replies = gemini
    replies.append(FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": "no"}]}}]}))
    r = client.post("/images/generate", json={"prompt": "banana"})
    assert r.status_code == 502


def test_provider_unreachable_is_500(client, monkeypatch):
    def boom(*a, **kw):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(gemini_llm.requests, "post", boom)
    r = client.post("/images/generate", json={"prompt": "banana"})
    assert r.status_code == 500
    assert r.json() == {"error": "Unexpected error generating image."}


def test_analyze_image(client, gemini):
    calls, replies = gemini
    replies.append(FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": "  A banana.  "}]}}]}))
    r = client.post("/analyze-image", json={"dataUrl": f"data:image/png;base64,{png_b64()}"})
    assert r.json() == {"description": "A banana."}
    parts = calls[0]["json"]["contents"][0]["parts"]
    assert parts[0]["inlineData"]["mimeType"] == "image/png"
    assert parts[1]["text"].startswith("Provide a concise creative analysis")


def test_analyze_image_failures(client, gemini):
    _, replies = gemini
    assert client.post("/analyze-image", json={"dataUrl": "not-a-data-url"}).status_code == 400
    replies.append(FakeResponse(500, "upstream exploded"))
    r = client.post("/analyze-image", json={"dataUrl": f"data:image/png;base64,{png_b64()}"})
    assert r.status_code == 502
    assert r.json() == {"error": "Image analysis failed", "details": "upstream exploded"}


def test_knowledge(client, monkeypatch):
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.update(url=url, params=params)
        return FakeResponse(200, {
            "Heading": "Banana",
            "AbstractText": "",
            "AbstractURL": "",
            "RelatedTopics": [{"Text": "Banana is a fruit", "FirstURL": "u1"}, {"Topics": [{"Text": "Plantain", "FirstURL": "u2"}]}],
        })

    monkeypatch.setattr(knowledge_tool.requests, "get", fake_get)
    r = client.get("/knowledge", params={"q": "banana"})
    assert r.status_code == 200
    assert r.json() == {
        "query": "banana",
        "heading": "Banana",
        "summary": "Banana is a fruit",
        "sourceUrl": None,
        "related": [{"text": "Banana is a fruit", "url": "u1"}, {"text": "Plantain", "url": "u2"}],
    }
    assert seen["params"]["format"] == "json"


def test_knowledge_requires_query(client):
    r = client.get("/knowledge", params={"q": "  "})
    assert r.status_code == 400
    assert r.json() == {"error": 'Missing query parameter "q"'}


def test_knowledge_provider_error(client, monkeypatch):
    monkeypatch.setattr(knowledge_tool.requests, "get", lambda *a, **kw: FakeResponse(503, {}))
    r = client.get("/knowledge", params={"q": "banana"})
    assert r.status_code == 502
    assert r.json() == {"error": "Knowledge provider returned 503"}


def test_inspiration(client, monkeypatch):
    images = [{"id": str(i), "prompt": "p", "src": f"s{i}", "srcTiny": f"t{i}"} for i in range(12)]
    monkeypatch.setattr(inspiration_tool.requests, "get", lambda *a, **kw: FakeResponse(200, {"images": images}))
    r = client.get("/inspiration", params={"q": "banana"})
    body = r.json()
    assert len(body["inspirations"]) == 8
    assert body["inspirations"][0]["thumbnail"] == "t0"
    assert client.get("/inspiration").status_code == 400


def test_unexpected_generate_failure_is_json_500(client, monkeypatch):
    def broken(*a, **kw):
        raise KeyError("inlineData")

    monkeypatch.setattr(routes_images, "generate_image", broken)
    r = client.post("/images/generate", json={"prompt": "banana"})
    assert r.status_code == 500
    assert r.json() == {"error": "Unexpected error generating image."}
