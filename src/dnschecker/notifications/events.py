"""
Notification events — what the checker asks the channel to deliver.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class EventType(str, Enum):
    IP_MISMATCH = "ip_mismatch"
    IP_RESTORED = "ip_restored"


class NotificationEvent(BaseModel):
    """A single alert about the monitored hostname."""

    event_type: EventType
    hostname: str
    dns_ip: str
    wan_ip: str
    interface: str = ""

    def render(self) -> str:
        """Plain-text message body."""
        if self.event_type == EventType.IP_RESTORED:
            return f"{self.hostname} match again: DNS={self.dns_ip} WAN={self.wan_ip}"
        lines = [f"{self.hostname} mismatch: DNS={self.dns_ip} WAN={self.wan_ip}"]
        if self.interface:
            lines.append(f"Router interface: {self.interface}")
        return "\n".join(lines)
