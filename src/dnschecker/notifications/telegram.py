"""
Telegram channel — sends alerts to one chat via the Bot API.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dnschecker.notifications.channel import NotificationChannel
from dnschecker.notifications.events import NotificationEvent

logger = logging.getLogger(__name__)

_BASE_URL = "https://api.telegram.org/bot{token}"


class TelegramChannel(NotificationChannel):
    """Outbound-only Telegram notification channel using Bot API."""

    name: str = "telegram"

    def __init__(
        self,
        token: str,
        chat_id: str,
        client: httpx.AsyncClient,
        timeout: float = 10.0,
        base_url: str = _BASE_URL,
    ) -> None:
        self.token = token
        self.chat_id = chat_id
        self._client = client
        self._timeout = timeout
        self._base_url = base_url.format(token=token)

    def _redact(self, text: Any) -> str:
        # httpx error messages embed the request URL, which carries the token
        return str(text).replace(self.token, "<token>") if self.token else str(text)

    async def send(self, event: NotificationEvent) -> bool:
        payload: dict[str, Any] = {
            "chat_id": self.chat_id,
            "text": event.render(),
            "disable_notification": False,
        }

        try:
            resp = await self._client.post(
                f"{self._base_url}/sendMessage",
                json=payload,
                timeout=self._timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("Failed to send Telegram message: %s", self._redact(exc))
            return False
        except ValueError:
            logger.warning("Telegram returned a non-JSON response")
            return False

        if not isinstance(data, dict) or data.get("ok") is not True:
            description = data.get("description", "") if isinstance(data, dict) else ""
            logger.warning("Telegram rejected the message: %s", description or data)
            return False

        logger.debug("Telegram %s message delivered", event.event_type.value)
        return True
