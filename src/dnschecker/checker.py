"""
Checker — one fetch → resolve → compare → notify cycle.

Per-cycle failures never escape ``run_cycle``: they end the cycle early,
get logged, and show up in the returned CycleResult.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from dnschecker.config import Settings
from dnschecker.models import (
    CycleOutcome,
    CycleResult,
    ResolvedAddress,
    Verdict,
    WanStatus,
)
from dnschecker.notifications.channel import NotificationChannel
from dnschecker.notifications.events import EventType, NotificationEvent
from dnschecker.notifications.lock import AlertLock
from dnschecker.notifications.telegram import TelegramChannel
from dnschecker.resolver import DnsLookupError, DnsResolver
from dnschecker.wan import WanIpError, WanIpFetcher

logger = logging.getLogger(__name__)


def compare(wan: WanStatus, resolved: ResolvedAddress) -> Verdict:
    """MATCH when the WAN address is one of the published addresses."""
    return Verdict.MATCH if resolved.contains(wan.ip) else Verdict.MISMATCH


class Checker:
    """Runs single check cycles against one hostname."""

    def __init__(
        self,
        hostname: str,
        fetcher: WanIpFetcher,
        resolver: DnsResolver,
        channel: NotificationChannel,
        lock: Optional[AlertLock] = None,
    ) -> None:
        self.hostname = hostname
        self.fetcher = fetcher
        self.resolver = resolver
        self.channel = channel
        self.lock = lock

    async def run_cycle(self, notify: bool = True) -> CycleResult:
        try:
            wan = await self.fetcher.fetch()
        except WanIpError as exc:
            logger.warning("Failed to get WAN IP address, skipping comparison: %s", exc)
            return CycleResult(outcome=CycleOutcome.WAN_FAILED, error=str(exc))

        try:
            resolved = await self.resolver.resolve(self.hostname)
        except DnsLookupError as exc:
            logger.warning("Failed to resolve %s, skipping comparison: %s", self.hostname, exc)
            return CycleResult(outcome=CycleOutcome.DNS_FAILED, wan=wan, error=str(exc))

        logger.debug(
            "The IP address of %s is %s, WAN IP address is %s",
            self.hostname,
            resolved.as_text(),
            wan.ip,
        )

        if compare(wan, resolved) is Verdict.MATCH:
            logger.debug("%s matches WAN IP %s", self.hostname, wan.ip)
            if notify and self.lock is not None and self.lock.exists():
                await self._send_restored(wan, resolved)
            return CycleResult(outcome=CycleOutcome.MATCH, wan=wan, resolved=resolved)

        logger.warning(
            "%s mismatch: DNS=%s WAN=%s", self.hostname, resolved.as_text(), wan.ip
        )
        outcome = await self._alert(wan, resolved) if notify else CycleOutcome.MISMATCH_NOT_NOTIFIED
        return CycleResult(outcome=outcome, wan=wan, resolved=resolved)

    async def _alert(self, wan: WanStatus, resolved: ResolvedAddress) -> CycleOutcome:
        if self.lock is not None and self.lock.is_active():
            logger.info("Alert already sent within cooldown, not sending again")
            return CycleOutcome.MISMATCH_SUPPRESSED

        event = NotificationEvent(
            event_type=EventType.IP_MISMATCH,
            hostname=self.hostname,
            dns_ip=resolved.as_text(),
            wan_ip=str(wan.ip),
            interface=wan.interface,
        )
        if not await self._safe_send(event):
            logger.warning("Mismatch notification not delivered, will retry next cycle")
            return CycleOutcome.MISMATCH_NOT_NOTIFIED

        logger.info("Mismatch notification sent via %s", self.channel.name)
        if self.lock is not None:
            self.lock.arm()
        return CycleOutcome.MISMATCH_NOTIFIED

    async def _send_restored(self, wan: WanStatus, resolved: ResolvedAddress) -> None:
        event = NotificationEvent(
            event_type=EventType.IP_RESTORED,
            hostname=self.hostname,
            dns_ip=resolved.as_text(),
            wan_ip=str(wan.ip),
            interface=wan.interface,
        )
        if await self._safe_send(event):
            logger.info("IP addresses are the same again, alert reset")
            self.lock.clear()
        else:
            logger.warning("Failed to send recovery notification")

    async def _safe_send(self, event: NotificationEvent) -> bool:
        try:
            return await self.channel.send(event)
        except Exception:
            logger.exception("Failed to send to channel %s", self.channel.name)
            return False


def build_checker(
    settings: Settings,
    router_client: httpx.AsyncClient,
    bot_client: httpx.AsyncClient,
) -> Checker:
    """Wire a Checker from settings and the process-wide HTTP clients."""
    lock = None
    if settings.lockfile is not None:
        lock = AlertLock(settings.lockfile, cooldown=settings.alert_cooldown)
    return Checker(
        hostname=settings.dns_hostname,
        fetcher=WanIpFetcher(router_client, settings),
        resolver=DnsResolver.from_settings(settings),
        channel=TelegramChannel(
            token=settings.telegram_bot_token.get_secret_value(),
            chat_id=settings.chat_id,
            client=bot_client,
            timeout=settings.request_timeout,
        ),
        lock=lock,
    )
