"""Post endpoints: CRUD and likes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from watched.core.deps import get_current_user, get_optional_user
from watched.core.rate_limit import rate_limit
from watched.db.session import get_db
from watched.models.user import User
from watched.schemas.common import MessageResponse
from watched.schemas.post import PostCreate, PostLikeOut, PostOut, PostUpdate
from watched.services.posts import (
    create_post,
    delete_post,
    get_post_dto,
    like_post,
    list_post_dtos,
    unlike_post,
    update_post,
)

router = APIRouter(dependencies=[Depends(rate_limit())])


@router.post("/create", response_model=PostOut)
def create(
    payload: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PostOut:
    return create_post(db, payload, current_user)


# Declared before /{post_id} so "all" is not parsed as an id.
@router.get("/all", response_model=list[PostOut])
def get_all(
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> list[PostOut]:
    return list_post_dtos(db, current_user.id if current_user else None)


@router.get("/{post_id}", response_model=PostOut)
def get_one(post_id: int = Path(..., ge=1), db: Session = Depends(get_db)) -> PostOut:
    return get_post_dto(db, post_id)


@router.put("/{post_id}", response_model=PostOut)
def update(
    payload: PostUpdate,
    post_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PostOut:
    return update_post(db, post_id, payload, current_user)


@router.delete("/{post_id}", response_model=MessageResponse)
def delete(
    post_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    delete_post(db, post_id, current_user)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=PostLikeOut)
def like(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PostLikeOut:
    return PostLikeOut.model_validate(like_post(db, post_id, current_user))


@router.delete("/{post_id}/like", response_model=MessageResponse)
def unlike(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    unlike_post(db, post_id, current_user)
    return MessageResponse(message="Like removed successfully")
