"""Shared enum values used by the database models and schemas."""

from __future__ import annotations

import enum


class AdminAction(str, enum.Enum):
    edited_post = "Edited Post"
    deleted_post = "Deleted Post"
    edited_comment = "Edited Comment"
    deleted_comment = "Deleted Comment"


class ActivityKind(str, enum.Enum):
    post = "Post"
    comment = "Comment"
    like = "Like"
    rating = "Rating"


class ActivityOperation(str, enum.Enum):
    create = "Create"
    edit = "Edit"
    delete = "Delete"


class ActivityFilter(str, enum.Enum):
    all = "all"
    past_month = "past-month"
    past_two_weeks = "past-2-weeks"
