"""Admin audit log and site activity trail."""

from __future__ import annotations

import calendar
import datetime as dt
import logging
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from watched.core.config import settings
from watched.db.base import ensure_utc, utcnow
from watched.models.admin_log import AdminLog
from watched.models.comment import Comment
from watched.models.enums import ActivityFilter, ActivityKind, ActivityOperation, AdminAction
from watched.models.post import Post
from watched.models.site_activity_log import SiteActivityLog
from watched.models.user import User
from watched.schemas.admin import AdminLogOut, SiteActivityOut

logger = logging.getLogger(__name__)

UNKNOWN_USERNAME = "Unknown"
PAST_TWO_WEEKS = dt.timedelta(days=14)


def record_admin_action(
    db: Session,
    *,
    admin_id: int,
    action: AdminAction,
    target_user_id: int | None = None,
    target_post_id: int | None = None,
    target_comment_id: int | None = None,
) -> AdminLog | None:
    """Append an audit row after the primary mutation has committed.

    Failures are logged and rolled back; the caller's change stays in place.
    """
    entry = AdminLog(
        admin_id=admin_id,
        action=action.value,
        target_user_id=target_user_id,
        target_post_id=target_post_id,
        target_comment_id=target_comment_id,
        created_at=utcnow(),
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Admin log write failed: admin=%s action=%s", admin_id, action.value)
        return None
    logger.info("Admin action recorded: admin=%s action=%s target_user=%s", admin_id, action.value, target_user_id)
    return entry


def record_site_activity(
    db: Session,
    *,
    user_id: int,
    activity: ActivityKind,
    operation: ActivityOperation,
) -> SiteActivityLog | None:
    entry = SiteActivityLog(
        user_id=user_id,
        activity=activity.value,
        operation=operation.value,
        time_of=utcnow(),
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Site activity write failed: user=%s %s/%s", user_id, activity.value, operation.value)
        return None
    return entry


def list_admin_logs(db: Session) -> list[AdminLogOut]:
    admin_user = aliased(User)
    target_user = aliased(User)
    rows = (
        db.query(
            AdminLog,
            admin_user.username,
            Post.title,
            Comment.content,
            target_user.username,
        )
        .outerjoin(admin_user, AdminLog.admin_id == admin_user.id)
        .outerjoin(Post, AdminLog.target_post_id == Post.id)
        .outerjoin(Comment, AdminLog.target_comment_id == Comment.id)
        .outerjoin(target_user, AdminLog.target_user_id == target_user.id)
        .order_by(AdminLog.created_at.desc(), AdminLog.id.desc())
        .all()
    )
    return [
        AdminLogOut(
            log_id=log.id,
            action=log.action,
            created_at=log.created_at,
            admin_name=admin_name,
            target_post_title=post_title,
            target_comment_content=comment_content,
            target_user_name=target_name,
        )
        for log, admin_name, post_title, comment_content, target_name in rows
    ]


def parse_activity_filter(value: str | None) -> ActivityFilter:
    try:
        return ActivityFilter((value or "").strip().lower())
    except ValueError:
        return ActivityFilter.all


def subtract_months(value: dt.datetime, months: int) -> dt.datetime:
    """Step back whole calendar months, clamping the day to the target month's length."""
    index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def activity_cutoff(selected: ActivityFilter, now: dt.datetime) -> dt.datetime | None:
    if selected == ActivityFilter.past_month:
        return subtract_months(now, 1)
    if selected == ActivityFilter.past_two_weeks:
        return now - PAST_TWO_WEEKS
    return None


def _to_local(value: dt.datetime | None, zone: ZoneInfo) -> dt.datetime | None:
    if value is None:
        return None
    return ensure_utc(value).astimezone(zone)


def list_site_activity(db: Session, activity_filter: ActivityFilter | str | None = None) -> list[SiteActivityOut]:
    selected = activity_filter if isinstance(activity_filter, ActivityFilter) else parse_activity_filter(activity_filter)
    query = db.query(SiteActivityLog, User.username).outerjoin(User, SiteActivityLog.user_id == User.id)
    cutoff = activity_cutoff(selected, utcnow())
    if cutoff is not None:
        query = query.filter(SiteActivityLog.time_of >= cutoff)
    rows = query.order_by(SiteActivityLog.time_of.desc(), SiteActivityLog.id.desc()).all()

    zone = ZoneInfo(settings.SITE_ACTIVITY_TIMEZONE)
    return [
        SiteActivityOut(
            id=entry.id,
            activity=entry.activity,
            operation=entry.operation,
            time_of=_to_local(entry.time_of, zone),
            user_id=entry.user_id,
            username=username or UNKNOWN_USERNAME,
        )
        for entry, username in rows
    ]
