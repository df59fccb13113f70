from __future__ import annotations

import json

import httpx
import pytest

from watched.core.exceptions import ExternalServiceError
from watched.services import ai as ai_service


def _gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_generate_reply_sends_system_prompt_then_user_prompt() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=_gemini_reply("Posts can be liked once."))

    reply = ai_service.generate_reply("How do likes work?", transport=httpx.MockTransport(handler))

    assert reply == "Posts can be liked once."
    request = captured[0]
    assert request.url.path.endswith(":generateContent")
    assert request.url.params["key"] == "test-gemini-key"
    contents = json.loads(request.content)["contents"]
    assert contents[0]["parts"][0]["text"] == ai_service.SYSTEM_PROMPT
    assert contents[1]["parts"][0]["text"] == "How do likes work?"


def test_generate_reply_falls_back_when_text_missing() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"candidates": []}))
    assert ai_service.generate_reply("hi", transport=transport) == ai_service.NO_RESPONSE


def test_generate_reply_echoes_provider_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(429, text='{"error": "quota"}'))
    with pytest.raises(ExternalServiceError) as excinfo:
        ai_service.generate_reply("hi", transport=transport)
    assert excinfo.value.message == "Error: 429"
    assert excinfo.value.details["content"] == '{"error": "quota"}'


def test_chat_endpoint_requires_prompt(client) -> None:
    response = client.post("/api/AI/chat", json={"prompt": "   "})
    assert response.status_code == 400
    assert response.json()["message"] == "Prompt is required."


def test_chat_endpoint_returns_reply(client, monkeypatch) -> None:
    monkeypatch.setattr("watched.routers.ai.generate_reply", lambda prompt: f"echo: {prompt}")
    response = client.post("/api/AI/chat", json={"prompt": "What is Watched?"})
    assert response.status_code == 200
    assert response.json() == {"response": "echo: What is Watched?"}


def test_chat_endpoint_maps_provider_failure_to_500(client, monkeypatch) -> None:
    def _fail(prompt: str) -> str:
        raise ExternalServiceError("Error: 503", provider="gemini", status_code=503, content="unavailable")

    monkeypatch.setattr("watched.routers.ai.generate_reply", _fail)
    response = client.post("/api/AI/chat", json={"prompt": "hello"})
    assert response.status_code == 500
    assert response.json()["message"] == "Error: 503"
    assert response.json()["details"]["content"] == "unavailable"
