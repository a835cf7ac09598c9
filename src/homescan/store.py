"""
In-memory scan snapshot store and snapshot diffing.

Lifecycle: empty at startup, populated by the first discovery,
then replaced wholesale by every later discovery or diff. Nothing
is persisted across restarts.

The owning request handler must hold `lock` across
read -> aggregate -> diff -> replace so concurrent requests cannot
clobber each other's baseline.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional, Sequence

from ._types import Device, DiffResult, Snapshot, now_utc
from .errors import NoBaselineError

logger = logging.getLogger(__name__)


def diff_snapshots(previous: Snapshot, current: Snapshot) -> DiffResult:
    """
    Compare two snapshots by MAC address.

    IP addresses are not compared: DHCP moves them around, the MAC
    is the stable identity.
    """
    previous_macs = previous.macs
    current_macs = current.macs

    return DiffResult(
        new_devices=[d for d in current.devices if d.mac not in previous_macs],
        removed_devices=[d for d in previous.devices if d.mac not in current_macs],
        previous_scan_time=previous.taken_at,
        current_scan_time=current.taken_at,
    )


class ScanStore:
    """Holds the most recent device snapshot."""

    def __init__(self):
        self._snapshot: Optional[Snapshot] = None
        self.lock = asyncio.Lock()

    def current_snapshot(self) -> Optional[Snapshot]:
        return self._snapshot

    @property
    def has_baseline(self) -> bool:
        return self._snapshot is not None

    def replace(self, snapshot: Snapshot) -> Optional[Snapshot]:
        """Swap in a new snapshot, returning the one it replaced."""
        previous = self._snapshot
        self._snapshot = snapshot
        logger.debug(
            f"Snapshot replaced: {len(snapshot.devices)} devices "
            f"at {snapshot.taken_at.isoformat()}"
        )
        return previous

    def record(
        self,
        devices: Sequence[Device],
        taken_at: Optional[datetime] = None,
    ) -> Snapshot:
        """Build a snapshot from devices and make it current."""
        snapshot = Snapshot(devices=tuple(devices), taken_at=taken_at or now_utc())
        self.replace(snapshot)
        return snapshot

    def diff(
        self,
        devices: Sequence[Device],
        taken_at: Optional[datetime] = None,
    ) -> DiffResult:
        """
        Diff devices against the baseline, then make them the new baseline.

        Raises:
            NoBaselineError: if no discovery has run yet
        """
        previous = self._snapshot
        if previous is None:
            raise NoBaselineError()

        current = self.record(devices, taken_at)
        result = diff_snapshots(previous, current)
        logger.info(f"Diff against {previous.taken_at.isoformat()}: {result.summary}")
        return result
