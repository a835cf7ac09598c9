"""Tests for the snapshot store and diffing."""

import asyncio
from datetime import datetime, timezone

import pytest

from homescan._types import Device, Snapshot
from homescan.errors import NoBaselineError
from homescan.store import ScanStore, diff_snapshots

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
T1 = datetime(2026, 1, 1, 12, 5, tzinfo=timezone.utc)
T2 = datetime(2026, 1, 1, 12, 10, tzinfo=timezone.utc)

ROUTER = Device(ip="192.168.1.1", mac="88:de:7c:e2:cc:c0", manufacturer="Mitrastar Technology (ISP Router)")
VACUUM = Device(ip="192.168.1.2", mac="e4:24:6c:aa:bb:cc", manufacturer="Xiaomi")
LAPTOP = Device(ip="192.168.1.10", mac="ac:de:48:00:11:22", manufacturer="Apple")


class TestDiffSnapshots:
    """Tests for the pure diff."""

    def test_identical(self):
        """Identical snapshots have no changes."""
        result = diff_snapshots(
            Snapshot((ROUTER, VACUUM), T0),
            Snapshot((ROUTER, VACUUM), T1),
        )

        assert result.new_devices == []
        assert result.removed_devices == []
        assert result.previous_scan_time == T0
        assert result.current_scan_time == T1

    def test_new_and_removed(self):
        """Should report devices by MAC presence."""
        result = diff_snapshots(
            Snapshot((ROUTER, VACUUM), T0),
            Snapshot((ROUTER, LAPTOP), T1),
        )

        assert result.new_devices == [LAPTOP]
        assert result.removed_devices == [VACUUM]

    def test_ip_change_is_not_a_change(self):
        """A device that moved IP is the same device."""
        moved = Device(ip="192.168.1.50", mac=VACUUM.mac, manufacturer="Xiaomi")

        result = diff_snapshots(
            Snapshot((VACUUM,), T0),
            Snapshot((moved,), T1),
        )

        assert result.has_changes is False

    def test_same_ip_new_mac_is_a_change(self):
        """A different MAC at a known IP is a new device."""
        replacement = Device(ip=VACUUM.ip, mac="e4:24:6c:00:00:99", manufacturer="Xiaomi")

        result = diff_snapshots(
            Snapshot((VACUUM,), T0),
            Snapshot((replacement,), T1),
        )

        assert result.new_devices == [replacement]
        assert result.removed_devices == [VACUUM]

    def test_from_empty_baseline(self):
        """Everything is new against an empty baseline."""
        result = diff_snapshots(Snapshot((), T0), Snapshot((ROUTER,), T1))

        assert result.new_devices == [ROUTER]
        assert result.removed_devices == []


class TestScanStore:
    """Tests for ScanStore."""

    def test_starts_empty(self):
        """A new store has no baseline."""
        store = ScanStore()

        assert store.has_baseline is False
        assert store.current_snapshot() is None

    def test_record(self):
        """Recording should make the snapshot current."""
        store = ScanStore()

        snapshot = store.record([ROUTER, VACUUM], taken_at=T0)

        assert store.has_baseline is True
        assert store.current_snapshot() is snapshot
        assert snapshot.devices == (ROUTER, VACUUM)
        assert snapshot.taken_at == T0

    def test_replace_returns_previous(self):
        """Replace should hand back the snapshot it replaced."""
        store = ScanStore()
        first = Snapshot((ROUTER,), T0)

        assert store.replace(first) is None
        assert store.replace(Snapshot((VACUUM,), T1)) is first

    def test_diff_without_baseline(self):
        """Diffing before any discovery should raise."""
        store = ScanStore()

        with pytest.raises(NoBaselineError):
            store.diff([ROUTER])

        assert store.has_baseline is False

    def test_diff_twice_unchanged(self):
        """Two diffs with no network change report nothing."""
        store = ScanStore()
        store.record([ROUTER, VACUUM], taken_at=T0)

        first = store.diff([ROUTER, VACUUM], taken_at=T1)
        second = store.diff([ROUTER, VACUUM], taken_at=T2)

        assert first.has_changes is False
        assert second.has_changes is False

    def test_diff_advances_baseline(self):
        """Each diff should compare against the previous diff's scan."""
        store = ScanStore()
        store.record([ROUTER], taken_at=T0)

        first = store.diff([ROUTER, LAPTOP], taken_at=T1)
        second = store.diff([ROUTER, LAPTOP], taken_at=T2)

        assert first.new_devices == [LAPTOP]
        assert second.has_changes is False
        assert second.previous_scan_time == T1
        assert store.current_snapshot().taken_at == T2

    def test_lock_is_asyncio_lock(self):
        """Handlers serialize on the store lock."""
        assert isinstance(ScanStore().lock, asyncio.Lock)

    def test_no_baseline_message(self):
        """The error should tell the user what to do."""
        assert "Run a discovery first" in str(NoBaselineError())
