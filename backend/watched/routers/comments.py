"""Comment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from watched.core.deps import get_current_user
from watched.core.rate_limit import rate_limit
from watched.db.session import get_db
from watched.models.user import User
from watched.schemas.comment import CommentCreate, CommentOut, CommentUpdate
from watched.schemas.common import MessageResponse
from watched.services.comments import (
    create_comment,
    delete_comment,
    get_comment,
    list_comments_for_post,
    update_comment,
)

router = APIRouter(dependencies=[Depends(rate_limit())])


@router.post("/create", response_model=CommentOut)
def create(
    payload: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CommentOut:
    return create_comment(db, payload, current_user)


@router.get("/post/{post_id}", response_model=list[CommentOut])
def for_post(post_id: int, db: Session = Depends(get_db)) -> list[CommentOut]:
    return list_comments_for_post(db, post_id)


@router.get("/{comment_id}", response_model=CommentOut)
def get_one(comment_id: int = Path(..., ge=1), db: Session = Depends(get_db)) -> CommentOut:
    return get_comment(db, comment_id)


@router.put("/{comment_id}", response_model=CommentOut)
def update(
    payload: CommentUpdate,
    comment_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CommentOut:
    return update_comment(db, comment_id, payload, current_user)


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete(
    comment_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    delete_comment(db, comment_id, current_user)
    return MessageResponse(message="Comment deleted successfully")
