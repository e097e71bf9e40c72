"""
Notifications for dnschecker.

Mismatch and recovery events are delivered to a single Telegram chat.
An optional lock file keeps repeated alerts for the same mismatch quiet.
"""

from dnschecker.notifications.channel import NotificationChannel
from dnschecker.notifications.events import EventType, NotificationEvent
from dnschecker.notifications.lock import AlertLock
from dnschecker.notifications.telegram import TelegramChannel

__all__ = [
    "AlertLock",
    "EventType",
    "NotificationChannel",
    "NotificationEvent",
    "TelegramChannel",
]
