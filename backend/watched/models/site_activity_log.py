"""General site activity trail (posts, comments, likes, ratings)."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from watched.db.base import Base, utcnow


class SiteActivityLog(Base):
    __tablename__ = "site_activity_logs"
    __table_args__ = (
        Index("ix_site_activity_logs_time_of", "time_of"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    activity: Mapped[str] = mapped_column(String(32), nullable=False)
    operation: Mapped[str] = mapped_column(String(32), nullable=False)
    time_of: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
