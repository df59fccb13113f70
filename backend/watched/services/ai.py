"""Chat assistant backed by the Gemini generateContent API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from watched.core.config import settings
from watched.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response from Gemini."
OFF_TOPIC_REPLY = "I'm only trained to assist with the Watched app. Please ask something related to it."

SYSTEM_PROMPT = f"""
You are a helpful assistant for the Watched app, a social movie platform. Only answer questions
about the app's features and behaviour. If asked anything else, reply: "{OFF_TOPIC_REPLY}"

What users can do:
- Register with a username, password and profile details, log in, refresh their session, or enter as a guest.
- Browse movies, see their details and the average of all user ratings.
- Rate a movie once, from 1 to 10.
- Write posts (reviews) about a movie, edit or delete their own posts.
- Like other users' posts (not their own) and remove their like.
- Comment on posts, edit or delete their own comments.
- Chat with this assistant.

Admins can edit or delete any post or comment. Those edits are marked with the admin's name and
recorded in an admin log. Admins can also review general site activity.

Authentication uses short-lived JWT access tokens (15 minutes) and refresh tokens (1 hour).
Logging in again ends any earlier session.

You may summarize or clarify these features. Do not answer unrelated questions such as weather,
maths or geography.
""".strip()


def _endpoint() -> str:
    return f"{settings.GEMINI_BASE_URL.rstrip('/')}/{settings.GEMINI_MODEL}:generateContent"


def build_payload(prompt: str) -> dict[str, Any]:
    return {
        "contents": [
            {"role": "user", "parts": [{"text": SYSTEM_PROMPT}]},
            {"role": "user", "parts": [{"text": prompt}]},
        ]
    }


def extract_text(data: Any) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return NO_RESPONSE
    return text or NO_RESPONSE


def generate_reply(prompt: str, *, transport: httpx.BaseTransport | None = None) -> str:
    try:
        with httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport) as client:
            response = client.post(
                _endpoint(),
                params={"key": settings.GEMINI_API_KEY},
                json=build_payload(prompt),
            )
    except httpx.HTTPError as exc:
        logger.warning("Gemini request failed: %s", exc)
        raise ExternalServiceError(f"Error: {exc}", provider="gemini") from exc

    if response.status_code >= 400:
        logger.warning("Gemini returned %s", response.status_code)
        raise ExternalServiceError(
            f"Error: {response.status_code}",
            provider="gemini",
            status_code=response.status_code,
            content=response.text,
        )
    try:
        data = response.json()
    except ValueError:
        return NO_RESPONSE
    return extract_text(data)
