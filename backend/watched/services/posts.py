"""Post CRUD and like handling."""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from watched.core.exceptions import BadRequestError, NotFoundError
from watched.core.rbac import is_admin_override, require_owner_or_admin
from watched.db.base import utcnow
from watched.models.enums import ActivityKind, ActivityOperation, AdminAction
from watched.models.movie import Movie
from watched.models.post import Post, PostLike
from watched.models.user import User
from watched.schemas.post import PostCreate, PostOut, PostUpdate
from watched.services.audit import record_admin_action, record_site_activity

logger = logging.getLogger(__name__)

POST_NOT_FOUND = "Post not found"
ALREADY_LIKED = "Post already liked."
NOT_LIKED = "Post not liked or post not found"


def admin_edit_suffix(admin: User) -> str:
    return f" -edited by {admin.username}"


def _to_dto(post: Post, *, like_count: int, has_liked: bool = False) -> PostOut:
    return PostOut(
        post_id=post.id,
        user_id=post.user_id,
        movie_id=post.movie_id,
        title=post.title,
        content=post.content,
        created_at=post.created_at,
        updated_at=post.updated_at,
        username=post.user.username if post.user else "",
        like_count=like_count,
        has_liked=has_liked,
    )


def _like_count(db: Session, post_id: int) -> int:
    return db.query(func.count(PostLike.id)).filter(PostLike.post_id == post_id).scalar() or 0


def get_post(db: Session, post_id: int) -> Post | None:
    return db.query(Post).options(joinedload(Post.user)).filter(Post.id == post_id).first()


def _require_post(db: Session, post_id: int) -> Post:
    post = get_post(db, post_id)
    if not post:
        raise NotFoundError(POST_NOT_FOUND)
    return post


def get_post_dto(db: Session, post_id: int, current_user_id: int | None = None) -> PostOut:
    post = _require_post(db, post_id)
    has_liked = False
    if current_user_id is not None:
        has_liked = (
            db.query(PostLike.id)
            .filter(PostLike.post_id == post.id, PostLike.user_id == current_user_id)
            .first()
            is not None
        )
    return _to_dto(post, like_count=_like_count(db, post.id), has_liked=has_liked)


def list_post_dtos(db: Session, current_user_id: int | None = None) -> list[PostOut]:
    posts = db.query(Post).options(joinedload(Post.user)).order_by(Post.created_at.desc(), Post.id.desc()).all()
    counts = dict(
        db.query(PostLike.post_id, func.count(PostLike.id)).group_by(PostLike.post_id).all()
    )
    liked: set[int] = set()
    if current_user_id is not None:
        liked = {
            post_id
            for (post_id,) in db.query(PostLike.post_id).filter(PostLike.user_id == current_user_id).all()
        }
    return [
        _to_dto(post, like_count=counts.get(post.id, 0), has_liked=post.id in liked)
        for post in posts
    ]


def create_post(db: Session, data: PostCreate, author: User) -> PostOut:
    if data.movie_id <= 0 or db.get(Movie, data.movie_id) is None:
        logger.warning("Post rejected (unknown movie %s) by %s", data.movie_id, author.username)
        raise BadRequestError("Invalid Movie ID.")

    now = utcnow()
    post = Post(
        user_id=author.id,
        movie_id=data.movie_id,
        title=data.title,
        content=data.content,
        created_at=now,
        updated_at=now,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post created: id=%s user=%s", post.id, author.username)
    record_site_activity(db, user_id=author.id, activity=ActivityKind.post, operation=ActivityOperation.create)
    return get_post_dto(db, post.id, author.id)


def update_post(db: Session, post_id: int, data: PostUpdate, requester: User) -> PostOut:
    post = _require_post(db, post_id)
    require_owner_or_admin(requester, post.user_id)
    override = is_admin_override(requester, post.user_id)
    owner_id = post.user_id

    post.title = data.title
    post.content = data.content + admin_edit_suffix(requester) if override else data.content
    post.updated_at = utcnow()
    db.add(post)
    db.commit()
    logger.info("Post updated: id=%s by=%s override=%s", post.id, requester.username, override)

    if override:
        record_admin_action(
            db,
            admin_id=requester.id,
            action=AdminAction.edited_post,
            target_user_id=owner_id,
            target_post_id=post_id,
        )
    record_site_activity(db, user_id=requester.id, activity=ActivityKind.post, operation=ActivityOperation.edit)
    return get_post_dto(db, post_id, requester.id)


def delete_post(db: Session, post_id: int, requester: User) -> None:
    post = _require_post(db, post_id)
    require_owner_or_admin(requester, post.user_id)
    override = is_admin_override(requester, post.user_id)
    owner_id = post.user_id

    db.delete(post)
    db.commit()
    logger.info("Post deleted: id=%s by=%s override=%s", post_id, requester.username, override)

    if override:
        record_admin_action(db, admin_id=requester.id, action=AdminAction.deleted_post, target_user_id=owner_id)
    record_site_activity(db, user_id=requester.id, activity=ActivityKind.post, operation=ActivityOperation.delete)


def find_like(db: Session, post_id: int, user_id: int) -> PostLike | None:
    return db.query(PostLike).filter(PostLike.post_id == post_id, PostLike.user_id == user_id).first()


def like_post(db: Session, post_id: int, user: User) -> PostLike:
    post = db.get(Post, post_id)
    if not post:
        raise BadRequestError("Post not found.")
    # Applies to admins too.
    if post.user_id == user.id:
        raise BadRequestError("You cannot like your own post.")
    if find_like(db, post_id, user.id):
        raise BadRequestError(ALREADY_LIKED)

    like = PostLike(post_id=post_id, user_id=user.id, created_at=utcnow())
    db.add(like)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Duplicate like caught by constraint: post=%s user=%s", post_id, user.id)
        raise BadRequestError(ALREADY_LIKED)
    db.refresh(like)
    logger.info("Post liked: post=%s user=%s", post_id, user.username)
    record_site_activity(db, user_id=user.id, activity=ActivityKind.like, operation=ActivityOperation.create)
    return like


def unlike_post(db: Session, post_id: int, user: User) -> None:
    like = find_like(db, post_id, user.id)
    if not like:
        raise BadRequestError(NOT_LIKED)
    db.delete(like)
    db.commit()
    logger.info("Post unliked: post=%s user=%s", post_id, user.username)
    record_site_activity(db, user_id=user.id, activity=ActivityKind.like, operation=ActivityOperation.delete)
