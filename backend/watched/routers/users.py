"""User signup, login, token refresh and guest endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from watched.core.deps import TokenIdentity, get_token_identity
from watched.core.exceptions import BadRequestError
from watched.core.rate_limit import rate_limit
from watched.db.session import get_db
from watched.schemas.auth import (
    GuestLoginResponse,
    JwtCheckResponse,
    JwtUser,
    LoginRequest,
    RefreshRequest,
    RefreshResponse,
    TokenResponse,
)
from watched.schemas.user import SignupRequest, UserProfileOut
from watched.services.auth import login, login_as_guest, validate_refresh_token
from watched.services.users import register_user

router = APIRouter(dependencies=[Depends(rate_limit("auth"))])


@router.post("/signup", response_model=UserProfileOut)
def signup(payload: SignupRequest, db: Session = Depends(get_db)) -> UserProfileOut:
    if payload.missing_fields():
        raise BadRequestError("All fields are required!", details={"missing": payload.missing_fields()})
    user = register_user(db, payload)
    return UserProfileOut(
        user_id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        phone_number=user.phone_number,
        address=user.address,
    )


@router.post("/login", response_model=TokenResponse)
def login_user(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    if not (payload.username or "").strip() or not (payload.password or "").strip():
        raise BadRequestError("Username and password are required!")
    tokens = login(db, payload.username, payload.password)
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user_id=tokens.user.id,
        username=tokens.user.username,
    )


@router.post("/refresh", response_model=RefreshResponse)
def refresh_tokens(payload: RefreshRequest, db: Session = Depends(get_db)) -> RefreshResponse:
    if not payload.is_complete():
        raise BadRequestError("Invalid request body! User ID and token are required.")
    tokens = validate_refresh_token(db, payload.user_id, payload.token)
    return RefreshResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post("/guest", response_model=GuestLoginResponse)
def guest_login(db: Session = Depends(get_db)) -> GuestLoginResponse:
    tokens = login_as_guest(db)
    return GuestLoginResponse(
        user_id=tokens.user.id,
        username=tokens.user.username,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/checkJwtValid", response_model=JwtCheckResponse)
def check_jwt_valid(identity: TokenIdentity = Depends(get_token_identity)) -> JwtCheckResponse:
    return JwtCheckResponse(user=JwtUser(user_id=identity.user_id, username=identity.username))
