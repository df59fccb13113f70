"""Security helpers for hashing passwords, signing access JWTs and minting refresh tokens."""

from __future__ import annotations

import datetime as dt
import secrets
import string
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from watched.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ACCESS_TOKEN_TYPE = "access"
USER_ID_CLAIM = "userId"
USERNAME_CLAIM = "username"
_LETTERS = string.ascii_letters


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def random_letters(length: int) -> str:
    return "".join(secrets.choice(_LETTERS) for _ in range(length))


def generate_refresh_token_value() -> str:
    return secrets.token_urlsafe(32)


def create_access_token(user_id: int, username: str, *, now: dt.datetime | None = None) -> str:
    issued_at = now or dt.datetime.now(dt.timezone.utc)
    expire = issued_at + dt.timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode: dict[str, Any] = {
        USER_ID_CLAIM: str(user_id),
        USERNAME_CLAIM: username,
        "type": ACCESS_TOKEN_TYPE,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    # python-jose applies no leeway unless asked, so expiry is exact.
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except ExpiredSignatureError as exc:
        raise ValueError("expired_token") from exc
    except JWTError as exc:
        raise ValueError("invalid_token") from exc
