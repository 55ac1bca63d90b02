"""Channel and watch-history projections."""

from __future__ import annotations

from marshmallow import Schema, fields


class ChannelProfileSchema(Schema):
    full_name = fields.String(data_key="fullName")
    username = fields.String()
    email = fields.String()
    avatar = fields.String()
    cover_image = fields.String(data_key="coverImage", allow_none=True)
    subscribers_count = fields.Integer(data_key="subscribersCount")
    channels_subscribed_to_count = fields.Integer(data_key="channelsSubscribedToCount")
    is_subscribed = fields.Boolean(data_key="isSubscribed")


class VideoOwnerSchema(Schema):
    full_name = fields.String(data_key="fullName")
    username = fields.String()
    avatar = fields.String()


class WatchedVideoSchema(Schema):
    """A watched video with its nested owner projection."""

    id = fields.Integer()
    title = fields.String()
    description = fields.String(allow_none=True)
    video_file = fields.String(data_key="videoFile")
    thumbnail = fields.String()
    duration = fields.Float()
    views = fields.Integer()
    is_published = fields.Boolean(data_key="isPublished")
    created_at = fields.DateTime(data_key="createdAt")
    owner = fields.Nested(VideoOwnerSchema)
