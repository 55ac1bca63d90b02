"""Subscription edge: ``subscriber`` follows ``channel``."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vidtube.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .user import User


class Subscription(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Directed follow relationship between two users.

    One edge per ``(subscriber_id, channel_id)`` pair; self-follows are
    rejected by a check constraint.
    """

    __tablename__ = "subscriptions"

    subscriber_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    channel_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    subscriber: Mapped[User] = relationship(foreign_keys=[subscriber_id])
    channel: Mapped[User] = relationship(foreign_keys=[channel_id])

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_subscriber_channel"),
        CheckConstraint("subscriber_id <> channel_id", name="no_self_subscription"),
        Index("ix_subscriptions_channel_id", "channel_id"),
        Index("ix_subscriptions_subscriber_id", "subscriber_id"),
    )
