"""Centralized ownership and admin policy helpers."""

from __future__ import annotations

from watched.core.exceptions import InsufficientPermissionsError
from watched.models.user import User


def is_admin(user: User) -> bool:
    return bool(user.is_admin)


def is_owner(user: User, owner_id: int) -> bool:
    return user.id == owner_id


def can_modify(user: User, owner_id: int) -> bool:
    return is_owner(user, owner_id) or is_admin(user)


def is_admin_override(user: User, owner_id: int) -> bool:
    """True when an admin acts on content that belongs to someone else."""
    return is_admin(user) and not is_owner(user, owner_id)


def require_owner_or_admin(user: User, owner_id: int) -> None:
    if not can_modify(user, owner_id):
        raise InsufficientPermissionsError("forbidden")
