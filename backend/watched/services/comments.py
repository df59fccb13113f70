"""Comment CRUD on posts."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session, joinedload

from watched.core.exceptions import BadRequestError, NotFoundError
from watched.core.rbac import is_admin_override, require_owner_or_admin
from watched.db.base import utcnow
from watched.models.comment import Comment
from watched.models.enums import ActivityKind, ActivityOperation, AdminAction
from watched.models.post import Post
from watched.models.user import User
from watched.schemas.comment import CommentCreate, CommentOut, CommentUpdate
from watched.services.audit import record_admin_action, record_site_activity
from watched.services.posts import admin_edit_suffix

logger = logging.getLogger(__name__)

COMMENT_NOT_FOUND = "Comment not found."


def _to_dto(comment: Comment) -> CommentOut:
    return CommentOut(
        comment_id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        content=comment.content,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        username=comment.user.username if comment.user else "",
    )


def _load(db: Session, comment_id: int) -> Comment:
    comment = (
        db.query(Comment)
        .options(joinedload(Comment.user))
        .filter(Comment.id == comment_id)
        .first()
    )
    if not comment:
        raise NotFoundError(COMMENT_NOT_FOUND)
    return comment


def get_comment(db: Session, comment_id: int) -> CommentOut:
    return _to_dto(_load(db, comment_id))


def list_comments_for_post(db: Session, post_id: int) -> list[CommentOut]:
    comments = (
        db.query(Comment)
        .options(joinedload(Comment.user))
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return [_to_dto(comment) for comment in comments]


def create_comment(db: Session, data: CommentCreate, author: User) -> CommentOut:
    if not data.content.strip():
        raise BadRequestError("Comment content is required.")
    if db.get(Post, data.post_id) is None:
        logger.warning("Comment rejected (unknown post %s) by %s", data.post_id, author.username)
        raise BadRequestError("Invalid Post ID.")

    now = utcnow()
    comment = Comment(
        post_id=data.post_id,
        user_id=author.id,
        content=data.content,
        created_at=now,
        updated_at=now,
    )
    db.add(comment)
    db.commit()
    logger.info("Comment created: id=%s post=%s user=%s", comment.id, comment.post_id, author.username)
    comment_id = comment.id
    record_site_activity(db, user_id=author.id, activity=ActivityKind.comment, operation=ActivityOperation.create)
    return get_comment(db, comment_id)


def update_comment(db: Session, comment_id: int, data: CommentUpdate, requester: User) -> CommentOut:
    comment = _load(db, comment_id)
    require_owner_or_admin(requester, comment.user_id)
    override = is_admin_override(requester, comment.user_id)
    owner_id = comment.user_id

    comment.content = data.content + admin_edit_suffix(requester) if override else data.content
    comment.updated_at = utcnow()
    db.add(comment)
    db.commit()
    logger.info("Comment updated: id=%s by=%s override=%s", comment_id, requester.username, override)

    if override:
        record_admin_action(
            db,
            admin_id=requester.id,
            action=AdminAction.edited_comment,
            target_user_id=owner_id,
            target_comment_id=comment_id,
        )
    record_site_activity(db, user_id=requester.id, activity=ActivityKind.comment, operation=ActivityOperation.edit)
    return get_comment(db, comment_id)


def delete_comment(db: Session, comment_id: int, requester: User) -> None:
    comment = _load(db, comment_id)
    require_owner_or_admin(requester, comment.user_id)
    override = is_admin_override(requester, comment.user_id)
    owner_id = comment.user_id

    db.delete(comment)
    db.commit()
    logger.info("Comment deleted: id=%s by=%s override=%s", comment_id, requester.username, override)

    if override:
        record_admin_action(db, admin_id=requester.id, action=AdminAction.deleted_comment, target_user_id=owner_id)
    record_site_activity(db, user_id=requester.id, activity=ActivityKind.comment, operation=ActivityOperation.delete)
