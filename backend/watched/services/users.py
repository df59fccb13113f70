"""Service helpers for user registration and lookup."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from watched.core.exceptions import BadRequestError
from watched.core.security import hash_password
from watched.models.user import User
from watched.schemas.user import SignupRequest

logger = logging.getLogger(__name__)

USER_EXISTS_MESSAGE = "User already exists!"


def find_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def register_user(db: Session, data: SignupRequest) -> User:
    if find_user_by_username(db, data.username or ""):
        logger.warning("Signup rejected (username taken): %s", data.username)
        raise BadRequestError(USER_EXISTS_MESSAGE)

    user = User(
        username=data.username,
        password_hash=hash_password(data.password or ""),
        full_name=data.full_name,
        email=data.email,
        phone_number=data.phone_number,
        address=data.address,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Signup rejected (unique constraint): %s", data.username)
        raise BadRequestError(USER_EXISTS_MESSAGE)
    db.refresh(user)
    logger.info("User registered: %s", user.username)
    return user
