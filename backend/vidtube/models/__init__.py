from vidtube.models.subscription import Subscription
from vidtube.models.user import User
from vidtube.models.video import Video, WatchHistoryEntry

__all__ = [
    "Subscription",
    "User",
    "Video",
    "WatchHistoryEntry",
]
