"""
homescan - point-in-time inventory of the local IPv4 subnet.

Reads the OS ARP cache (optionally after a ping sweep to fill it),
resolves manufacturers from MAC prefixes, tracks what changed since
the last scan and flags devices that deserve a security review.

Nothing runs on a schedule: every scan is triggered by a request.
Snapshots live in memory only.
"""

__version__ = "0.1.0"

from ._types import (
    ArpEntry,
    Device,
    DiffResult,
    FlaggedDevice,
    FlagReport,
    ParsedLine,
    ParseOutcome,
    RiskLevel,
    Snapshot,
    PRIVATE_MAC_LABEL,
    UNKNOWN_LABEL,
)
from .aggregator import aggregate
from .classifier import SecurityClassifier
from .errors import CommandExecutionError, InvalidMacError, NoBaselineError
from .oui import is_private_mac, normalize_mac, resolve_vendor
from .store import ScanStore, diff_snapshots

__all__ = [
    "__version__",
    "ArpEntry",
    "Device",
    "DiffResult",
    "FlaggedDevice",
    "FlagReport",
    "ParsedLine",
    "ParseOutcome",
    "RiskLevel",
    "Snapshot",
    "PRIVATE_MAC_LABEL",
    "UNKNOWN_LABEL",
    "aggregate",
    "SecurityClassifier",
    "CommandExecutionError",
    "InvalidMacError",
    "NoBaselineError",
    "is_private_mac",
    "normalize_mac",
    "resolve_vendor",
    "ScanStore",
    "diff_snapshots",
]
