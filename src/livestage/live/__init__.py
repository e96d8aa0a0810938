"""Live reload: file watching and change notification."""

from livestage.live.hub import NotificationHub, Subscriber
from livestage.live.reload import LiveReloadManager
from livestage.live.watcher import ChangeWatcher

__all__ = [
    "ChangeWatcher",
    "LiveReloadManager",
    "NotificationHub",
    "Subscriber",
]
