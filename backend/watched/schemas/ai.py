"""Schemas for the chat assistant endpoint."""

from __future__ import annotations

from pydantic import Field, field_validator

from watched.core.sanitize import clean_multiline
from watched.schemas.common import CamelModel

MAX_PROMPT_LEN = 4000


class ChatRequest(CamelModel):
    prompt: str | None = Field(default=None, max_length=MAX_PROMPT_LEN)

    @field_validator("prompt", mode="before")
    @classmethod
    def normalize_prompt(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return clean_multiline(value)


class ChatResponse(CamelModel):
    response: str
