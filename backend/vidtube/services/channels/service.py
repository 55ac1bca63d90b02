# vidtube/services/channels/service.py
from __future__ import annotations

from vidtube.services._shared.base import BaseService
from vidtube.services._shared.errors import BadRequestError, NotFoundError
from vidtube.services.channels.dto import ChannelProfileOut, WatchedVideoOut


class ChannelService(BaseService):
    """Read-only views over subscriptions and watch history."""

    def get_channel_profile(self, username: str | None, viewer_id: int | None) -> ChannelProfileOut:
        """
        Resolve a channel by handle with subscriber counters.

        :param username: Channel handle, matched case-insensitively.
        :param viewer_id: Requesting user, used for ``is_subscribed``.
        :raises BadRequestError: If the handle is blank.
        :raises NotFoundError: If no user has that handle.
        """
        handle = (username or "").strip().lower()
        if not handle:
            raise BadRequestError("Username is missing")
        with self.ro_uow() as uow:
            row = uow.relationships.channel_profile(handle, viewer_id)
        if row is None:
            raise NotFoundError("Channel", handle)
        return ChannelProfileOut.from_row(row)

    def get_watch_history(self, user_id: int | None) -> list[WatchedVideoOut]:
        """
        List the caller's watched videos, oldest first, one item per video.

        :raises BadRequestError: If no caller id is given.
        """
        if user_id is None:
            raise BadRequestError("User id is missing")
        with self.ro_uow() as uow:
            rows = uow.relationships.watch_history(user_id)
        return [WatchedVideoOut.from_row(row) for row in rows]
