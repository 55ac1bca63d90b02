# vidtube/services/channels/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from vidtube.repositories.relationships import ChannelProfileRow, WatchedVideoRow


@dataclass(frozen=True, slots=True)
class ChannelProfileOut:
    """
    A user seen as a channel by the requesting viewer.

    :param subscribers_count: Edges whose channel is this user.
    :param channels_subscribed_to_count: Edges whose subscriber is this user.
    :param is_subscribed: Whether the viewer follows this channel.
    """

    full_name: str
    username: str
    email: str
    avatar: str
    cover_image: str | None
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool

    @classmethod
    def from_row(cls, row: ChannelProfileRow) -> ChannelProfileOut:
        return cls(
            full_name=row.full_name,
            username=row.username,
            email=row.email,
            avatar=row.avatar,
            cover_image=row.cover_image,
            subscribers_count=row.subscribers_count,
            channels_subscribed_to_count=row.channels_subscribed_to_count,
            is_subscribed=row.is_subscribed,
        )


@dataclass(frozen=True, slots=True)
class VideoOwnerOut:
    full_name: str
    username: str
    avatar: str


@dataclass(frozen=True, slots=True)
class WatchedVideoOut:
    """One watch-history item with its owner's public projection."""

    id: int
    title: str
    description: str | None
    video_file: str
    thumbnail: str
    duration: float
    views: int
    is_published: bool
    created_at: datetime
    owner: VideoOwnerOut

    @classmethod
    def from_row(cls, row: WatchedVideoRow) -> WatchedVideoOut:
        return cls(
            id=row.id,
            title=row.title,
            description=row.description,
            video_file=row.video_file,
            thumbnail=row.thumbnail,
            duration=row.duration,
            views=row.views,
            is_published=row.is_published,
            created_at=row.created_at,
            owner=VideoOwnerOut(
                full_name=row.owner_full_name,
                username=row.owner_username,
                avatar=row.owner_avatar,
            ),
        )
