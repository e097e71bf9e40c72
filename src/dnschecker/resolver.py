"""
DNS resolver — looks up the addresses currently published for a hostname.
"""

from __future__ import annotations

import logging
from ipaddress import ip_address
from typing import Any, Sequence

import dns.asyncresolver
import dns.exception
import dns.resolver

from dnschecker.config import Settings
from dnschecker.models import IPAddress, ResolvedAddress

logger = logging.getLogger(__name__)


class DnsLookupError(Exception):
    """The hostname could not be resolved this cycle."""


class DnsResolver:
    """Resolves A and AAAA records through dnspython's async resolver."""

    record_types: tuple[str, ...] = ("A", "AAAA")

    def __init__(
        self,
        nameservers: Sequence[str] = (),
        timeout: float = 10.0,
        resolver: Any = None,
    ) -> None:
        if resolver is None:
            try:
                resolver = dns.asyncresolver.Resolver(configure=not nameservers)
            except dns.exception.DNSException as exc:
                raise DnsLookupError(f"Cannot configure DNS resolver: {exc}") from exc
            if nameservers:
                resolver.nameservers = list(nameservers)
            resolver.lifetime = timeout
        self._resolver = resolver

    @classmethod
    def from_settings(cls, settings: Settings) -> DnsResolver:
        return cls(nameservers=settings.nameservers, timeout=settings.request_timeout)

    async def resolve(self, hostname: str) -> ResolvedAddress:
        """
        Query every record type; one failing type does not discard the others.

        NXDOMAIN is final. Any other resolver error is logged and the next
        record type is tried, so a broken AAAA path still yields the A answer.
        """
        addresses: list[IPAddress] = []
        last_error: dns.exception.DNSException | None = None
        for rdtype in self.record_types:
            try:
                answer = await self._resolver.resolve(hostname, rdtype)
            except dns.resolver.NoAnswer:
                logger.debug("No %s records for %s", rdtype, hostname)
                continue
            except dns.resolver.NXDOMAIN as exc:
                raise DnsLookupError(f"{hostname} does not exist (NXDOMAIN)") from exc
            except dns.exception.DNSException as exc:
                logger.warning("%s lookup of %s failed: %s", rdtype, hostname, exc)
                last_error = exc
                continue
            addresses.extend(ip_address(rdata.address) for rdata in answer)

        if not addresses:
            if last_error is not None:
                raise DnsLookupError(f"Lookup of {hostname} failed: {last_error}") from last_error
            raise DnsLookupError(f"No address records found for {hostname}")

        resolved = ResolvedAddress(hostname=hostname, addresses=tuple(addresses))
        logger.debug("%s resolves to %s", hostname, resolved.as_text())
        return resolved
