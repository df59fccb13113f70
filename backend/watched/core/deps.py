"""Common FastAPI dependencies for authentication and authorization."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from watched.core.exceptions import AuthenticationException, ExpiredTokenError, InsufficientPermissionsError
from watched.core.rbac import is_admin
from watched.core.security import ACCESS_TOKEN_TYPE, USER_ID_CLAIM, USERNAME_CLAIM, decode_access_token
from watched.db.session import get_db
from watched.models.user import User


@dataclass(frozen=True)
class TokenIdentity:
    user_id: int
    username: str


def _extract_bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization", "")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    cleaned = token.strip()
    return cleaned or None


def _invalid_token() -> AuthenticationException:
    return AuthenticationException("invalid_token", error_code="INVALID_TOKEN")


def _identity_from_token(token: str) -> TokenIdentity:
    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        if str(exc) == "expired_token":
            raise ExpiredTokenError("access_token_expired")
        raise _invalid_token()

    token_type = payload.get("type")
    if token_type and token_type != ACCESS_TOKEN_TYPE:
        raise _invalid_token()
    raw_user_id = payload.get(USER_ID_CLAIM)
    username = payload.get(USERNAME_CLAIM)
    if not raw_user_id or not username:
        raise _invalid_token()
    try:
        user_id = int(raw_user_id)
    except (TypeError, ValueError):
        raise _invalid_token()
    return TokenIdentity(user_id=user_id, username=str(username))


def get_token_identity(request: Request) -> TokenIdentity:
    token = _extract_bearer_token(request)
    if not token:
        raise AuthenticationException("not_authenticated")
    return _identity_from_token(token)


def _load_user(db: Session, identity: TokenIdentity) -> User:
    user = db.get(User, identity.user_id)
    if not user:
        raise AuthenticationException("user_not_found", error_code="USER_NOT_FOUND")
    return user


def get_current_user(
    identity: TokenIdentity = Depends(get_token_identity),
    db: Session = Depends(get_db),
) -> User:
    # Always a fresh row so admin changes apply before the token expires.
    return _load_user(db, identity)


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> User | None:
    token = _extract_bearer_token(request)
    if not token:
        return None
    return _load_user(db, _identity_from_token(token))


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        raise InsufficientPermissionsError("forbidden")
    return user
