"""Pydantic schemas for user payloads and responses."""

from __future__ import annotations

import unicodedata

from pydantic import AliasChoices, EmailStr, Field, field_validator

from watched.core.sanitize import clean_email, clean_optional
from watched.schemas.common import CamelModel

MAX_USERNAME_LEN = 50
MAX_PASSWORD_LEN = 128


def check_password_chars(value: str | None) -> str | None:
    if value is not None and any(unicodedata.category(ch) == "Cc" for ch in value):
        raise ValueError("password_contains_control_chars")
    return value


class SignupRequest(CamelModel):
    # Every field is optional here so the route can answer with a single message.
    username: str | None = Field(default=None, max_length=MAX_USERNAME_LEN)
    password: str | None = Field(
        default=None,
        max_length=MAX_PASSWORD_LEN,
        validation_alias=AliasChoices("password", "passwordHash"),
    )
    full_name: str | None = Field(default=None, max_length=255)
    email: EmailStr | None = None
    phone_number: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=255)

    @field_validator("username", "full_name", "phone_number", "address", mode="before")
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        return clean_optional(value)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return clean_email(value) or None

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str | None) -> str | None:
        return check_password_chars(value)

    def missing_fields(self) -> list[str]:
        required = ("username", "password", "full_name", "email", "phone_number", "address")
        return [name for name in required if not (getattr(self, name) or "").strip()]


class UserProfileOut(CamelModel):
    message: str = "User registered successfully"
    user_id: int
    username: str
    email: str | None = None
    full_name: str | None = None
    phone_number: str | None = None
    address: str | None = None
