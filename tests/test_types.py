"""Tests for homescan type definitions."""

from datetime import datetime, timezone

import pytest

from homescan._types import (
    ArpEntry,
    Device,
    DiffResult,
    FlaggedDevice,
    FlagReport,
    RiskLevel,
    Snapshot,
    now_utc,
)

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
T1 = datetime(2026, 1, 1, 12, 5, tzinfo=timezone.utc)


class TestNowUtc:
    """Tests for the timestamp helper."""

    def test_timezone_aware(self):
        """Timestamps should carry UTC tzinfo."""
        assert now_utc().tzinfo == timezone.utc


class TestDevice:
    """Tests for Device."""

    def test_defaults(self):
        """Manufacturer and hostname should be optional."""
        device = Device(ip="192.168.1.5", mac="ac:de:48:00:11:22")

        assert device.manufacturer is None
        assert device.hostname is None
        assert device.last_seen.tzinfo == timezone.utc

    def test_frozen(self):
        """Devices should be immutable."""
        device = Device(ip="192.168.1.5", mac="ac:de:48:00:11:22")

        with pytest.raises(AttributeError):
            device.ip = "192.168.1.6"

    def test_is_private_mac(self):
        """Should expose the locally administered bit."""
        assert Device(ip="192.168.1.5", mac="da:a1:19:00:00:01").is_private_mac is True
        assert Device(ip="192.168.1.5", mac="ac:de:48:00:11:22").is_private_mac is False

    def test_to_dict(self):
        """Should serialize for the API."""
        device = Device(
            ip="192.168.1.5",
            mac="ac:de:48:00:11:22",
            manufacturer="Apple",
            last_seen=T0,
        )

        assert device.to_dict() == {
            "ip": "192.168.1.5",
            "mac": "ac:de:48:00:11:22",
            "manufacturer": "Apple",
            "hostname": None,
            "last_seen": "2026-01-01T12:00:00+00:00",
            "is_private_mac": False,
        }


class TestSnapshot:
    """Tests for Snapshot."""

    def test_macs(self):
        """Should expose the set of MACs."""
        snapshot = Snapshot(devices=(
            Device(ip="192.168.1.2", mac="e4:24:6c:00:00:01"),
            Device(ip="192.168.1.10", mac="ac:de:48:00:00:02"),
        ))

        assert snapshot.macs == frozenset({"e4:24:6c:00:00:01", "ac:de:48:00:00:02"})

    def test_empty_snapshot(self):
        """An empty snapshot is still a snapshot."""
        snapshot = Snapshot(devices=())

        assert snapshot.macs == frozenset()


class TestDiffResult:
    """Tests for DiffResult."""

    def test_no_changes_summary(self):
        """Should report no changes when both lists are empty."""
        result = DiffResult([], [], T0, T1)

        assert result.has_changes is False
        assert result.summary == "No changes detected"

    def test_summary_counts(self):
        """Should count new and removed devices."""
        new = [Device(ip="192.168.1.7", mac="ac:de:48:00:00:07", last_seen=T1)]
        result = DiffResult(new, [], T0, T1)

        assert result.has_changes is True
        assert result.summary == "1 new device(s), 0 removed device(s)"

    def test_to_dict(self):
        """Should carry both scan times."""
        data = DiffResult([], [], T0, T1).to_dict()

        assert data["previous_scan"] == T0.isoformat()
        assert data["current_scan"] == T1.isoformat()
        assert data["new_devices"] == []
        assert data["removed_devices"] == []


class TestFlagReport:
    """Tests for FlaggedDevice and FlagReport."""

    def test_risk_level_values(self):
        """Risk levels should serialize as upper-case strings."""
        assert RiskLevel.HIGH.value == "HIGH"
        assert RiskLevel("LOW") == RiskLevel.LOW

    def test_flagged_device_to_dict(self):
        """Should merge device fields with the flag."""
        device = Device(ip="192.168.1.2", mac="e4:24:6c:00:00:01", manufacturer="Xiaomi", last_seen=T0)
        flagged = FlaggedDevice(device, "may phone home to external servers", RiskLevel.MEDIUM)

        data = flagged.to_dict()

        assert data["ip"] == "192.168.1.2"
        assert data["flag_reason"] == "may phone home to external servers"
        assert data["risk_level"] == "MEDIUM"

    def test_report_counts(self):
        """Should count flagged devices."""
        device = Device(ip="192.168.1.2", mac="e4:24:6c:00:00:01", manufacturer="Xiaomi")
        report = FlagReport(
            flagged=[FlaggedDevice(device, "reason", RiskLevel.MEDIUM)],
            total_devices=3,
            recommendations=("a", "b"),
        )

        data = report.to_dict()

        assert report.flagged_count == 1
        assert data["flagged_count"] == 1
        assert data["total_devices"] == 3
        assert data["recommendations"] == ["a", "b"]

    def test_arp_entry_defaults_complete(self):
        """Parsed entries default to complete."""
        entry = ArpEntry(ip="192.168.1.1", mac="88:de:7c:e2:cc:c0", interface="en0")

        assert entry.complete is True
