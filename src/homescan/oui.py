"""
OUI (Organizationally Unique Identifier) lookup for MAC address vendor identification.

The vendor table lives in data/oui.yaml and is loaded once, at import,
into a read-only mapping keyed by the lowercase colon-separated
3-octet prefix ("ac:de:48").
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import yaml

from .errors import InvalidMacError

logger = logging.getLogger(__name__)

# Path to the OUI database
OUI_DATABASE_PATH = Path(__file__).parent / "data" / "oui.yaml"

# 6 octets, 1-2 hex digits each (BSD arp drops leading zeros), one separator style
_MAC_PATTERN = re.compile(r"^[0-9a-f]{1,2}([:-])[0-9a-f]{1,2}(?:\1[0-9a-f]{1,2}){4}$")

# Second nibble values with the locally administered bit set and multicast clear
_LOCALLY_ADMINISTERED_NIBBLES = frozenset("26ae")


def normalize_mac(mac: str) -> str:
    """
    Normalize a MAC address to canonical form.

    Args:
        mac: MAC address with ':' or '-' separators, any case,
            1 or 2 hex digits per octet (e.g. "0:50:56:C0:0:8")

    Returns:
        Lowercase, colon-separated, zero-padded form ("00:50:56:c0:00:08")

    Raises:
        InvalidMacError: if the input is not a 6-octet MAC address
    """
    candidate = (mac or "").strip().lower()
    if not _MAC_PATTERN.match(candidate):
        raise InvalidMacError(mac)

    octets = re.split(r"[:-]", candidate)
    return ":".join(octet.zfill(2) for octet in octets)


def oui_prefix(mac: str) -> str:
    """Return the 3-octet vendor prefix of a MAC address."""
    return normalize_mac(mac)[:8]


def load_vendor_table(path: Path = OUI_DATABASE_PATH) -> Mapping[str, str]:
    """
    Load the vendor table from YAML.

    The file maps manufacturer name to a list of prefixes; the
    result is inverted to prefix -> manufacturer and frozen.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    table: dict[str, str] = {}
    for vendor, prefixes in data.items():
        for prefix in prefixes:
            normalized = str(prefix).strip().lower()
            if not re.fullmatch(r"[0-9a-f]{2}(?::[0-9a-f]{2}){2}", normalized):
                raise ValueError(f"Invalid OUI prefix {prefix!r} for {vendor} in {path}")
            if normalized in table and table[normalized] != vendor:
                logger.warning(
                    f"Duplicate OUI prefix {normalized}: "
                    f"{table[normalized]} replaced by {vendor}"
                )
            table[normalized] = str(vendor)

    logger.debug(f"OUI table loaded: {len(table)} prefixes from {path}")
    return MappingProxyType(table)


VENDOR_TABLE: Mapping[str, str] = load_vendor_table()


def resolve_vendor(
    mac: str,
    table: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Look up the manufacturer for a MAC address.

    Args:
        mac: MAC address (normalized before lookup, so case-insensitive)
        table: Vendor table to use (default: the bundled table)

    Returns:
        Manufacturer name or None if the prefix is not in the table

    Raises:
        InvalidMacError: for malformed MAC addresses
    """
    if table is None:
        table = VENDOR_TABLE
    return table.get(oui_prefix(mac))


def is_private_mac(mac: str) -> bool:
    """
    Check if a MAC is locally administered (privacy-randomized).

    Private MACs have the second hex character of the first
    octet set to 2, 6, a or e.

    Raises:
        InvalidMacError: for malformed MAC addresses
    """
    return normalize_mac(mac)[1] in _LOCALLY_ADMINISTERED_NIBBLES
