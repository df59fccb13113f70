"""Auth-related schemas (login, refresh, guest, token check)."""

from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator

from watched.core.sanitize import clean_single_line
from watched.schemas.common import CamelModel
from watched.schemas.user import MAX_PASSWORD_LEN, MAX_USERNAME_LEN, check_password_chars


class LoginRequest(CamelModel):
    username: str | None = Field(default=None, max_length=MAX_USERNAME_LEN)
    password: str | None = Field(
        default=None,
        max_length=MAX_PASSWORD_LEN,
        validation_alias=AliasChoices("password", "passwordHash"),
    )

    @field_validator("username", mode="before")
    @classmethod
    def normalize_username(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return clean_single_line(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str | None) -> str | None:
        return check_password_chars(value)


class RefreshRequest(CamelModel):
    user_id: int | None = None
    token: str | None = Field(default=None, max_length=256)

    @field_validator("token", mode="before")
    @classmethod
    def normalize_token(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return clean_single_line(value)

    def is_complete(self) -> bool:
        return bool(self.token) and self.user_id is not None and self.user_id > 0


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    user_id: int
    username: str


class RefreshResponse(CamelModel):
    access_token: str
    refresh_token: str


class GuestLoginResponse(CamelModel):
    message: str = "Login successful"
    user_id: int
    username: str
    access_token: str
    refresh_token: str


class JwtUser(CamelModel):
    user_id: int
    username: str


class JwtCheckResponse(CamelModel):
    message: str = "JWT is still valid"
    user: JwtUser
