"""Pydantic schemas for comments."""

from __future__ import annotations

import datetime as dt

from pydantic import Field, field_validator

from watched.core.sanitize import clean_multiline
from watched.schemas.common import CamelModel

MAX_COMMENT_LEN = 4000


class CommentCreate(CamelModel):
    post_id: int
    content: str = Field(default="", max_length=MAX_COMMENT_LEN)

    @field_validator("content", mode="before")
    @classmethod
    def normalize_content(cls, value: str) -> str:
        return clean_multiline(value)


class CommentUpdate(CamelModel):
    content: str = Field(min_length=1, max_length=MAX_COMMENT_LEN)

    @field_validator("content", mode="before")
    @classmethod
    def normalize_content(cls, value: str) -> str:
        return clean_multiline(value)


class CommentOut(CamelModel):
    comment_id: int
    post_id: int
    user_id: int
    content: str
    created_at: dt.datetime
    updated_at: dt.datetime
    username: str
