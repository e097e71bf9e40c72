"""
NotificationChannel — abstract base class for the alert channel.

The checker only talks to this interface, so tests can swap in a
recording channel for the Telegram one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dnschecker.notifications.events import NotificationEvent


class NotificationChannel(ABC):
    """Base class for notification channels."""

    name: str = "unnamed"

    @abstractmethod
    async def send(self, event: NotificationEvent) -> bool:
        """Deliver an event. Returns False on failure instead of raising."""
        ...
