"""Read-side joins over subscriptions, videos and watch history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import exists, false, func, select
from sqlalchemy.orm import Session, aliased

from vidtube.models import Subscription, User, Video, WatchHistoryEntry


@dataclass(frozen=True, slots=True)
class ChannelProfileRow:
    """Flat projection of a user seen as a channel."""

    id: int
    full_name: str
    username: str
    email: str
    avatar: str
    cover_image: str | None
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool


@dataclass(frozen=True, slots=True)
class WatchedVideoRow:
    """One watched video joined with its owner's public fields."""

    id: int
    title: str
    description: str | None
    video_file: str
    thumbnail: str
    duration: float
    views: int
    is_published: bool
    created_at: datetime
    owner_id: int
    owner_full_name: str
    owner_username: str
    owner_avatar: str


class RelationshipRepository:
    """Aggregation queries; never mutates anything."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def channel_profile(self, username: str, viewer_id: int | None) -> ChannelProfileRow | None:
        """
        Resolve a channel by folded handle with its subscription counters.

        Counts are correlated scalar subqueries so the whole profile is one
        round-trip. ``is_subscribed`` is false for anonymous viewers.

        :param username: Channel handle (folded before matching).
        :param viewer_id: Id of the requesting user, if any.
        :returns: Projection row, or ``None`` when no user has that handle.
        """
        subscribers = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        subscribed_to = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        if viewer_id is None:
            is_subscribed = false()
        else:
            is_subscribed = (
                exists()
                .where(Subscription.channel_id == User.id, Subscription.subscriber_id == viewer_id)
                .correlate(User)
            )
        stmt = select(
            User.id,
            User.full_name,
            User.username,
            User.email,
            User.avatar,
            User.cover_image,
            subscribers.label("subscribers_count"),
            subscribed_to.label("channels_subscribed_to_count"),
            is_subscribed.label("is_subscribed"),
        ).where(User.username == username.strip().lower())
        row = self.session.execute(stmt).first()
        if row is None:
            return None
        return ChannelProfileRow(
            id=row.id,
            full_name=row.full_name,
            username=row.username,
            email=row.email,
            avatar=row.avatar,
            cover_image=row.cover_image,
            subscribers_count=int(row.subscribers_count or 0),
            channels_subscribed_to_count=int(row.channels_subscribed_to_count or 0),
            is_subscribed=bool(row.is_subscribed),
        )

    def watch_history(self, user_id: int) -> list[WatchedVideoRow]:
        """
        Return the user's watched videos with owner projections.

        One query joins history → video → owner. Order follows the first time
        each video was watched; later re-watches do not duplicate it. Entries
        whose video no longer exists drop out of the inner join.
        """
        owner = aliased(User)
        first_seen = (
            select(
                WatchHistoryEntry.video_id.label("video_id"),
                func.min(WatchHistoryEntry.id).label("position"),
            )
            .where(WatchHistoryEntry.user_id == user_id)
            .group_by(WatchHistoryEntry.video_id)
            .subquery()
        )
        stmt = (
            select(Video, owner.full_name, owner.username, owner.avatar)
            .join(first_seen, first_seen.c.video_id == Video.id)
            .join(owner, owner.id == Video.owner_id)
            .order_by(first_seen.c.position)
        )
        rows: list[WatchedVideoRow] = []
        for video, full_name, username, avatar in self.session.execute(stmt).all():
            rows.append(
                WatchedVideoRow(
                    id=video.id,
                    title=video.title,
                    description=video.description,
                    video_file=video.video_file,
                    thumbnail=video.thumbnail,
                    duration=video.duration,
                    views=video.views,
                    is_published=video.is_published,
                    created_at=video.created_at,
                    owner_id=video.owner_id,
                    owner_full_name=full_name,
                    owner_username=username,
                    owner_avatar=avatar,
                )
            )
        return rows
