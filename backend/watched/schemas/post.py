"""Pydantic schemas for posts and likes."""

from __future__ import annotations

import datetime as dt

from pydantic import Field, field_validator

from watched.core.sanitize import clean_multiline, clean_single_line
from watched.schemas.common import CamelModel

MAX_TITLE_LEN = 255
MAX_CONTENT_LEN = 10000


class PostCreate(CamelModel):
    movie_id: int
    title: str = Field(min_length=1, max_length=MAX_TITLE_LEN)
    content: str = Field(min_length=1, max_length=MAX_CONTENT_LEN)

    @field_validator("title", mode="before")
    @classmethod
    def normalize_title(cls, value: str) -> str:
        return clean_single_line(value)

    @field_validator("content", mode="before")
    @classmethod
    def normalize_content(cls, value: str) -> str:
        return clean_multiline(value)


class PostUpdate(CamelModel):
    title: str = Field(min_length=1, max_length=MAX_TITLE_LEN)
    content: str = Field(min_length=1, max_length=MAX_CONTENT_LEN)

    @field_validator("title", mode="before")
    @classmethod
    def normalize_title(cls, value: str) -> str:
        return clean_single_line(value)

    @field_validator("content", mode="before")
    @classmethod
    def normalize_content(cls, value: str) -> str:
        return clean_multiline(value)


class PostOut(CamelModel):
    post_id: int
    user_id: int
    movie_id: int
    title: str
    content: str
    created_at: dt.datetime
    updated_at: dt.datetime
    username: str
    like_count: int = 0
    has_liked: bool = False


class PostLikeOut(CamelModel):
    post_like_id: int = Field(validation_alias="id")
    user_id: int
    post_id: int
    created_at: dt.datetime
