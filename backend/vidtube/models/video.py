"""Video records and the per-user watch history."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .user import User


class Video(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """A hosted video owned by a user (channel)."""

    __tablename__ = "videos"

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_file: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(500), nullable=False)
    duration: Mapped[float] = mapped_column(nullable=False, default=0.0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    owner: Mapped[User] = relationship(back_populates="videos")

    __table_args__ = (Index("ix_videos_owner_id", "owner_id"),)


class WatchHistoryEntry(PKMixin, ReprMixin, db.Model):
    """
    One "user watched video" event.

    The surrogate ``id`` is monotonic and defines the stored order of a
    user's history. The same video may appear several times.
    """

    __tablename__ = "watch_history"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    video_id: Mapped[int] = mapped_column(
        ForeignKey("videos.id", ondelete="CASCADE"), nullable=False
    )
    watched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    user: Mapped[User] = relationship(back_populates="watch_history")
    video: Mapped[Video] = relationship()

    __table_args__ = (Index("ix_watch_history_user_id", "user_id"),)
