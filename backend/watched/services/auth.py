"""Service helpers for login, guest sessions, and refresh-token lifecycle."""

from __future__ import annotations

import datetime as dt
import logging
import secrets
from dataclasses import dataclass

from sqlalchemy.orm import Session

from watched.core.config import settings
from watched.core.exceptions import AuthenticationException
from watched.core.security import (
    create_access_token,
    generate_refresh_token_value,
    hash_password,
    random_letters,
    verify_password,
)
from watched.db.base import ensure_utc, utcnow
from watched.models.refresh_token import RefreshToken
from watched.models.user import User
from watched.services.users import find_user_by_username

logger = logging.getLogger(__name__)

GUEST_PREFIX = "Guest"
GUEST_SUFFIX_LENGTH = 8
GUEST_PASSWORD_LENGTH = 12
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."
REFRESH_FAILED_MESSAGE = "Refresh token expired. Please log in again."


@dataclass(frozen=True)
class AuthTokens:
    access_token: str
    refresh_token: str
    user: User


def _refresh_expiry() -> dt.datetime:
    return utcnow() + dt.timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)


def _new_refresh_row(user_id: int) -> RefreshToken:
    return RefreshToken(
        user_id=user_id,
        token=generate_refresh_token_value(),
        expires_at=_refresh_expiry(),
        is_revoked=False,
    )


def issue_refresh_token(db: Session, user_id: int) -> str:
    row = _new_refresh_row(user_id)
    db.add(row)
    db.commit()
    return row.token


def rotate_refresh_token(db: Session, user_id: int) -> str:
    """Replace every refresh token of the user with a fresh one in a single commit."""
    db.query(RefreshToken).filter(RefreshToken.user_id == user_id).delete(synchronize_session=False)
    row = _new_refresh_row(user_id)
    db.add(row)
    db.commit()
    return row.token


def _refresh_failed() -> AuthenticationException:
    return AuthenticationException(REFRESH_FAILED_MESSAGE, error_code="REFRESH_FAILED")


def validate_refresh_token(db: Session, user_id: int, presented: str) -> AuthTokens:
    latest = (
        db.query(RefreshToken)
        .filter(RefreshToken.user_id == user_id, RefreshToken.is_revoked.is_(False))
        .order_by(RefreshToken.expires_at.desc())
        .first()
    )
    if latest is None or not secrets.compare_digest(latest.token.encode(), presented.encode()):
        logger.warning("Refresh rejected (no match) for user %s", user_id)
        raise _refresh_failed()
    if ensure_utc(latest.expires_at) <= utcnow():
        logger.warning("Refresh rejected (expired) for user %s", user_id)
        raise _refresh_failed()

    user = db.get(User, user_id)
    if not user:
        raise _refresh_failed()
    return AuthTokens(
        access_token=create_access_token(user.id, user.username),
        refresh_token=latest.token,
        user=user,
    )


def login(db: Session, username: str, password: str) -> AuthTokens:
    user = find_user_by_username(db, username)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Login failed for username: %s", username)
        raise AuthenticationException(INVALID_CREDENTIALS_MESSAGE, error_code="INVALID_CREDENTIALS")

    refresh_token = rotate_refresh_token(db, user.id)
    logger.info("User logged in: %s", user.username)
    return AuthTokens(
        access_token=create_access_token(user.id, user.username),
        refresh_token=refresh_token,
        user=user,
    )


def login_as_guest(db: Session) -> AuthTokens:
    username = GUEST_PREFIX + random_letters(GUEST_SUFFIX_LENGTH)
    while find_user_by_username(db, username):
        username = GUEST_PREFIX + random_letters(GUEST_SUFFIX_LENGTH)

    user = User(
        username=username,
        password_hash=hash_password(random_letters(GUEST_PASSWORD_LENGTH)),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    refresh_token = issue_refresh_token(db, user.id)
    logger.info("Guest user created: %s", user.username)
    return AuthTokens(
        access_token=create_access_token(user.id, user.username),
        refresh_token=refresh_token,
        user=user,
    )
