"""Pydantic schemas for admin audit views."""

from __future__ import annotations

import datetime as dt

from watched.schemas.common import CamelModel


class AdminLogOut(CamelModel):
    log_id: int
    action: str
    created_at: dt.datetime
    admin_name: str | None = None
    target_post_title: str | None = None
    target_comment_content: str | None = None
    target_user_name: str | None = None


class SiteActivityOut(CamelModel):
    id: int
    activity: str
    operation: str
    time_of: dt.datetime | None = None
    user_id: int
    username: str
