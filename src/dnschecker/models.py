"""
Per-cycle values passed between the fetcher, the resolver and the checker.

Nothing here outlives a single check cycle.
"""

from __future__ import annotations

from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

IPAddress = Union[IPv4Address, IPv6Address]


class WanStatus(BaseModel):
    """External address the router reports for its WAN interface."""

    model_config = ConfigDict(frozen=True)

    interface: str
    ip: IPAddress


class ResolvedAddress(BaseModel):
    """Addresses currently published in DNS for a hostname."""

    model_config = ConfigDict(frozen=True)

    hostname: str
    addresses: tuple[IPAddress, ...] = Field(min_length=1)

    @field_validator("addresses")
    @classmethod
    def _dedupe(cls, value: tuple[IPAddress, ...]) -> tuple[IPAddress, ...]:
        return tuple(dict.fromkeys(value))

    def contains(self, ip: IPAddress) -> bool:
        return ip in self.addresses

    def as_text(self) -> str:
        return ",".join(str(a) for a in self.addresses)


class Verdict(str, Enum):
    MATCH = "match"
    MISMATCH = "mismatch"


class CycleOutcome(str, Enum):
    MATCH = "match"
    MISMATCH_NOTIFIED = "mismatch_notified"
    MISMATCH_NOT_NOTIFIED = "mismatch_not_notified"
    MISMATCH_SUPPRESSED = "mismatch_suppressed"
    WAN_FAILED = "wan_failed"
    DNS_FAILED = "dns_failed"


class CycleResult(BaseModel):
    """What one check cycle observed and did."""

    outcome: CycleOutcome
    wan: Optional[WanStatus] = None
    resolved: Optional[ResolvedAddress] = None
    error: str = ""

    @property
    def failed(self) -> bool:
        return self.outcome in (CycleOutcome.WAN_FAILED, CycleOutcome.DNS_FAILED)

    @property
    def mismatch(self) -> bool:
        return self.outcome in (
            CycleOutcome.MISMATCH_NOTIFIED,
            CycleOutcome.MISMATCH_NOT_NOTIFIED,
            CycleOutcome.MISMATCH_SUPPRESSED,
        )
