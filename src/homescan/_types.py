"""
Type definitions for homescan.

These dataclasses define the core domain model for address table parsing,
device aggregation, scan snapshots and security flagging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .oui import is_private_mac


def now_utc() -> datetime:
    """Get current UTC timestamp (replaces deprecated datetime.utcnow())."""
    return datetime.now(timezone.utc)


# Manufacturer sentinels used when the vendor table has no entry
PRIVATE_MAC_LABEL = "Private/Randomized MAC"
UNKNOWN_LABEL = "Unknown"

BROADCAST_MAC = "ff:ff:ff:ff:ff:ff"


class RiskLevel(str, Enum):
    """Security review risk levels."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ParseOutcome(str, Enum):
    """What the parser made of a single address table line."""
    ENTRY = "entry"                # Recognized, produced an ArpEntry
    DROPPED = "dropped"            # Recognized, intentionally discarded
    UNRECOGNIZED = "unrecognized"  # Matched no known platform format


@dataclass(frozen=True)
class ArpEntry:
    """
    One row of the address resolution cache.

    Only lives for the duration of a parse; incomplete rows never
    leave the parser.
    """
    ip: str
    mac: str  # canonical lowercase colon-separated
    interface: str
    complete: bool = True


@dataclass(frozen=True)
class ParsedLine:
    """Per-line parser result, keeps dropped and unrecognized lines apart."""
    line: str
    outcome: ParseOutcome
    entry: Optional[ArpEntry] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class Device:
    """
    A device found on the local subnet.

    The MAC address is the identity: it is unique within one
    aggregation result and is what diffs compare on.
    """
    ip: str
    mac: str
    manufacturer: Optional[str] = None
    hostname: Optional[str] = None
    last_seen: datetime = field(default_factory=now_utc)

    @property
    def is_private_mac(self) -> bool:
        """True when the locally administered bit is set."""
        return is_private_mac(self.mac)

    def to_dict(self) -> dict:
        return {
            "ip": self.ip,
            "mac": self.mac,
            "manufacturer": self.manufacturer,
            "hostname": self.hostname,
            "last_seen": self.last_seen.isoformat(),
            "is_private_mac": self.is_private_mac,
        }


@dataclass(frozen=True)
class Snapshot:
    """One complete, timestamped device list from a discovery pass."""
    devices: tuple[Device, ...]
    taken_at: datetime = field(default_factory=now_utc)

    @property
    def macs(self) -> frozenset[str]:
        return frozenset(d.mac for d in self.devices)


@dataclass
class DiffResult:
    """Devices that appeared or disappeared between two snapshots."""
    new_devices: list[Device]
    removed_devices: list[Device]
    previous_scan_time: datetime
    current_scan_time: datetime

    @property
    def has_changes(self) -> bool:
        return bool(self.new_devices or self.removed_devices)

    @property
    def summary(self) -> str:
        if not self.has_changes:
            return "No changes detected"
        return (
            f"{len(self.new_devices)} new device(s), "
            f"{len(self.removed_devices)} removed device(s)"
        )

    def to_dict(self) -> dict:
        return {
            "previous_scan": self.previous_scan_time.isoformat(),
            "current_scan": self.current_scan_time.isoformat(),
            "new_devices": [d.to_dict() for d in self.new_devices],
            "removed_devices": [d.to_dict() for d in self.removed_devices],
            "summary": self.summary,
        }


@dataclass(frozen=True)
class FlaggedDevice:
    """A device that needs security review, with the reason it was flagged."""
    device: Device
    flag_reason: str
    risk_level: RiskLevel

    def to_dict(self) -> dict:
        data = self.device.to_dict()
        data["flag_reason"] = self.flag_reason
        data["risk_level"] = self.risk_level.value
        return data


@dataclass
class FlagReport:
    """Result of running the security rules over a device list."""
    flagged: list[FlaggedDevice]
    total_devices: int
    recommendations: tuple[str, ...] = ()

    @property
    def flagged_count(self) -> int:
        return len(self.flagged)

    def to_dict(self) -> dict:
        return {
            "flagged_count": self.flagged_count,
            "total_devices": self.total_devices,
            "devices": [f.to_dict() for f in self.flagged],
            "recommendations": list(self.recommendations),
        }
