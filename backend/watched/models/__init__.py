"""Convenience imports for Alembic metadata discovery."""

from watched.models.user import User
from watched.models.refresh_token import RefreshToken
from watched.models.movie import Movie, MovieRating
from watched.models.post import Post, PostLike
from watched.models.comment import Comment
from watched.models.admin_log import AdminLog
from watched.models.site_activity_log import SiteActivityLog

__all__ = [
    "AdminLog",
    "Comment",
    "Movie",
    "MovieRating",
    "Post",
    "PostLike",
    "RefreshToken",
    "SiteActivityLog",
    "User",
]
