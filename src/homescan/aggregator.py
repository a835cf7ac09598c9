"""
Turn parsed ARP entries into the canonical device list.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from ._types import ArpEntry, Device, PRIVATE_MAC_LABEL, UNKNOWN_LABEL, now_utc
from .oui import is_private_mac, resolve_vendor

logger = logging.getLogger(__name__)

# Link-local and the local virtualization bridge
EXCLUDED_IP_PREFIXES = ("169.254.", "192.168.64.")


def ip_sort_key(ip: str) -> tuple[int, ...]:
    """Numeric per-octet key, so 192.168.1.9 sorts before 192.168.1.10."""
    return tuple(int(octet) for octet in ip.split("."))


def resolve_manufacturer(mac: str) -> str:
    """Vendor table hit, else the private-MAC label, else Unknown."""
    vendor = resolve_vendor(mac)
    if vendor:
        return vendor
    if is_private_mac(mac):
        return PRIVATE_MAC_LABEL
    return UNKNOWN_LABEL


def aggregate(
    entries: Iterable[ArpEntry],
    now: Optional[datetime] = None,
) -> list[Device]:
    """
    Deduplicate, filter, label and sort ARP entries.

    The first entry seen for a MAC wins (the same device often shows up
    on several interfaces). Link-local and VM bridge addresses are
    skipped. Output is sorted by numeric IP.
    """
    seen: set[str] = set()
    devices: list[Device] = []
    last_seen = now or now_utc()

    for entry in entries:
        # Deduplicate by MAC
        if entry.mac in seen:
            continue
        seen.add(entry.mac)

        if entry.ip.startswith(EXCLUDED_IP_PREFIXES):
            continue

        devices.append(Device(
            ip=entry.ip,
            mac=entry.mac,
            manufacturer=resolve_manufacturer(entry.mac),
            last_seen=last_seen,
        ))

    devices.sort(key=lambda d: ip_sort_key(d.ip))
    logger.debug(f"Aggregated {len(devices)} devices")
    return devices
