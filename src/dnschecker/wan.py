"""
WAN IP fetcher — asks the router/firewall management API for the address
currently assigned to its external interface.

The appliance (OPNsense ``/api/diagnostics/interface/getInterfaceConfig``)
answers with a JSON object keyed by interface device name::

    {"igb3": {"ipv4": [{"ipaddr": "203.0.113.5", ...}], ...}, ...}

Authentication is HTTP basic auth with the API key as user name and the
API secret as password.
"""

from __future__ import annotations

import logging
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Any

import httpx

from dnschecker.config import Settings
from dnschecker.models import WanStatus

logger = logging.getLogger(__name__)


class WanIpError(Exception):
    """The WAN address could not be obtained this cycle."""


def _interface_ipv4(entry: Any) -> str | None:
    if not isinstance(entry, dict):
        return None
    ipv4 = entry.get("ipv4")
    if not isinstance(ipv4, list) or not ipv4:
        return None
    first = ipv4[0]
    if not isinstance(first, dict):
        return None
    addr = first.get("ipaddr")
    return addr if isinstance(addr, str) and addr else None


def _is_external(addr: IPv4Address | IPv6Address) -> bool:
    # carrier-grade NAT space is neither private nor global
    return not (
        addr.is_private
        or addr.is_loopback
        or addr.is_link_local
        or addr.is_multicast
        or addr.is_unspecified
        or addr.is_reserved
    )


def _auto_select(payload: dict[str, Any]) -> tuple[str, str]:
    """First interface with a global IPv4 address, else one outside private ranges."""
    candidates: list[tuple[str, IPv4Address | IPv6Address, str]] = []
    for name, entry in payload.items():
        addr = _interface_ipv4(entry)
        if addr is None:
            continue
        try:
            candidates.append((name, ip_address(addr), addr))
        except ValueError:
            continue
    if not candidates:
        raise WanIpError("No interface with an IPv4 address in router response")
    for name, ip, addr in candidates:
        if ip.is_global:
            return name, addr
    for name, ip, addr in candidates:
        if _is_external(ip):
            return name, addr
    raise WanIpError("No public IPv4 address in router response; set INTERFACE")


def parse_wan_payload(payload: Any, interface: str = "") -> WanStatus:
    """Extract the WAN address from a decoded router response."""
    if not isinstance(payload, dict):
        raise WanIpError("Router response is not a JSON object")

    if interface:
        entry = payload.get(interface)
        if entry is None:
            raise WanIpError(f'Interface "{interface}" not found in router response')
        if not isinstance(entry, dict) or not entry.get("ipv4"):
            raise WanIpError(f'No "ipv4" data for interface "{interface}"')
        addr = _interface_ipv4(entry)
        if addr is None:
            raise WanIpError(f'No "ipaddr" for interface "{interface}"')
        name = interface
    else:
        name, addr = _auto_select(payload)

    try:
        ip = ip_address(addr)
    except ValueError as exc:
        raise WanIpError(f"Router reported an invalid address {addr!r}") from exc
    if not isinstance(ip, IPv4Address):
        raise WanIpError(f"Router reported a non-IPv4 address {addr!r}")
    return WanStatus(interface=name, ip=ip)


class WanIpFetcher:
    """Fetches the WAN address over the shared HTTP client."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self.url = settings.url
        self.interface = settings.interface
        self._auth = httpx.BasicAuth(
            settings.api_key, settings.api_secret.get_secret_value()
        )
        self._timeout = settings.request_timeout

    async def fetch(self) -> WanStatus:
        """One authenticated GET; raises WanIpError on any failure."""
        try:
            resp = await self._client.get(
                self.url, auth=self._auth, timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            raise WanIpError(f"Request to router API failed: {exc}") from exc

        if not resp.is_success:
            raise WanIpError(f"Router API returned HTTP {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise WanIpError(f"Router API returned invalid JSON: {exc}") from exc

        status = parse_wan_payload(payload, self.interface)
        logger.debug("Router reports %s on %s", status.ip, status.interface)
        return status
