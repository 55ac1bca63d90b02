from .relationships import ChannelProfileRow, RelationshipRepository, WatchedVideoRow
from .user import UserRepository

__all__ = [
    "ChannelProfileRow",
    "RelationshipRepository",
    "UserRepository",
    "WatchedVideoRow",
]
