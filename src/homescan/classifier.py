"""
Security flagging based on manufacturer.

Rules are checked in fixed priority order and the first match wins.
Devices matching no rule are not flagged.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ._types import (
    Device,
    FlaggedDevice,
    FlagReport,
    RiskLevel,
    PRIVATE_MAC_LABEL,
    UNKNOWN_LABEL,
)

logger = logging.getLogger(__name__)

# Static advice, not derived from the scan
RECOMMENDATIONS = (
    "Review each flagged device to confirm its purpose",
    "Check Pi-hole logs for suspicious DNS queries",
    "Consider isolating IoT devices on a separate VLAN",
    "Block unnecessary outbound connections at the firewall",
)


def flag_device(device: Device) -> Optional[FlaggedDevice]:
    """
    Decide whether a device needs security review.

    Returns:
        FlaggedDevice with reason and risk, or None if not flagged
    """
    manufacturer = device.manufacturer or ""

    for detector in (
        _detect_xiaomi,
        _detect_chinese_manufacturer,
        _detect_randomized_mac,
        _detect_unknown_manufacturer,
    ):
        result = detector(manufacturer)
        if result:
            reason, risk = result
            return FlaggedDevice(device=device, flag_reason=reason, risk_level=risk)

    return None


def _detect_xiaomi(manufacturer: str) -> Optional[tuple[str, RiskLevel]]:
    if "Xiaomi" in manufacturer:
        return "may phone home to external servers", RiskLevel.MEDIUM
    return None


def _detect_chinese_manufacturer(manufacturer: str) -> Optional[tuple[str, RiskLevel]]:
    if "China" in manufacturer:
        return "manufacturer requires verification", RiskLevel.HIGH
    return None


def _detect_randomized_mac(manufacturer: str) -> Optional[tuple[str, RiskLevel]]:
    if manufacturer == PRIVATE_MAC_LABEL:
        return "identity obscured by randomization", RiskLevel.LOW
    return None


def _detect_unknown_manufacturer(manufacturer: str) -> Optional[tuple[str, RiskLevel]]:
    if manufacturer == UNKNOWN_LABEL:
        return "unrecognized manufacturer", RiskLevel.MEDIUM
    return None


class SecurityClassifier:
    """Applies the flagging rules to a device list."""

    def __init__(self, recommendations: tuple[str, ...] = RECOMMENDATIONS):
        self.recommendations = recommendations

    def classify(self, devices: Iterable[Device]) -> FlagReport:
        """
        Flag devices that need review.

        Returns:
            FlagReport with the flagged subset (in input order),
            counts and the static recommendations
        """
        devices = list(devices)
        flagged = [f for f in (flag_device(d) for d in devices) if f is not None]

        if flagged:
            high = sum(1 for f in flagged if f.risk_level == RiskLevel.HIGH)
            logger.info(
                f"{len(flagged)} of {len(devices)} devices flagged for review "
                f"({high} high risk)"
            )

        return FlagReport(
            flagged=flagged,
            total_devices=len(devices),
            recommendations=self.recommendations,
        )
