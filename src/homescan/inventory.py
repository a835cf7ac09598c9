"""
Inventory export and discovery reports.

Renders device lists as markdown notes with YAML frontmatter (one per
device, ready to drop into a notes vault), as JSON, or as a single
markdown summary report.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

import yaml

from ._types import Device, RiskLevel, UNKNOWN_LABEL, now_utc
from .classifier import SecurityClassifier, flag_device

# Checked in order against the lowercased manufacturer; first hit wins
CATEGORY_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("apple",), "Computing"),
    (("synology",), "Networking"),
    (("raspberry",), "Computing"),
    (("router", "mitrastar"), "Networking"),
    (("google", "nest"), "Smart Home"),
    (("xiaomi",), "Smart Home"),
    (("amazon", "alexa"), "Smart Home"),
    (("samsung", "humax", "sony"), "Entertainment"),
    (("nintendo", "playstation", "xbox"), "Entertainment"),
    (("vm", "virtual"), "Virtual"),
)

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')

SECURITY_SECTION = """
## Security

This device may communicate with servers outside your control. Consider:
- Monitoring DNS queries via Pi-hole
- Isolating on a separate VLAN
- Blocking unnecessary outbound connections
"""


@dataclass(frozen=True)
class InventoryItem:
    """One exported note."""
    filename: str
    content: str

    def to_dict(self) -> dict:
        return {"filename": self.filename, "content": self.content}


def categorize_device(device: Device) -> str:
    """Guess a device category from its manufacturer."""
    manufacturer = (device.manufacturer or "").lower()
    for keywords, category in CATEGORY_RULES:
        if any(keyword in manufacturer for keyword in keywords):
            return category
    return "Unknown"


def generate_filename(device: Device) -> str:
    """Build a filesystem-safe note filename."""
    if device.hostname:
        name = device.hostname
    elif device.manufacturer and device.manufacturer != UNKNOWN_LABEL:
        name = f"{device.manufacturer} - {device.ip}"
    else:
        name = f"Unknown Device - {device.ip}"

    return _UNSAFE_FILENAME_CHARS.sub("-", name)[:100] + ".md"


def generate_frontmatter(device: Device, category: str) -> str:
    data = {
        "inventory_type": "equipment",
        "category": category,
        "status": "active",
        "acquired": None,
        "cost": None,
        "ip_address": device.ip,
        "mac_address": device.mac,
        "manufacturer": device.manufacturer or UNKNOWN_LABEL,
    }
    # Randomized MACs are flagged LOW but are not marked for review
    flagged = flag_device(device)
    if flagged is not None and flagged.risk_level != RiskLevel.LOW:
        data["security_review"] = True
    data["notes"] = "Auto-discovered by homescan"

    body = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    return f"---\n{body}---"


def generate_markdown(device: Device, today: Optional[datetime] = None) -> str:
    """Render a single device note."""
    category = categorize_device(device)
    title = device.hostname or device.manufacturer or f"Device at {device.ip}"
    date = (today or now_utc()).date().isoformat()

    content = f"""{generate_frontmatter(device, category)}

# {title}

## Details

**Make/Brand:** {device.manufacturer or UNKNOWN_LABEL}
**Model:**
**IP Address:** {device.ip}
**MAC Address:** {device.mac}

## Notes

Auto-discovered by homescan on {date}.
"""

    flagged = flag_device(device)
    if flagged and (
        flagged.risk_level == RiskLevel.HIGH
        or "Xiaomi" in (device.manufacturer or "")
    ):
        content += SECURITY_SECTION

    return content


def export_inventory(devices: Sequence[Device]) -> list[InventoryItem]:
    """Export devices as markdown inventory notes."""
    return [
        InventoryItem(filename=generate_filename(d), content=generate_markdown(d))
        for d in devices
    ]


def export_json(devices: Sequence[Device]) -> list[dict]:
    return [d.to_dict() for d in devices]


def generate_discovery_report(
    devices: Sequence[Device],
    classifier: Optional[SecurityClassifier] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """
    Generate a markdown summary of a discovery.

    Includes counts by category, every device, and the devices
    flagged for security review.
    """
    classifier = classifier or SecurityClassifier()
    generated_at = generated_at or now_utc()

    by_category: dict[str, int] = {}
    for device in devices:
        category = categorize_device(device)
        by_category[category] = by_category.get(category, 0) + 1

    lines = [
        "# Network Discovery Report",
        "",
        f"**Date:** {generated_at.isoformat()}",
        f"**Total Devices:** {len(devices)}",
        "",
        "## Summary by Category",
        "",
        "| Category | Count |",
        "|----------|-------|",
    ]
    for category, count in sorted(by_category.items()):
        lines.append(f"| {category} | {count} |")

    lines += [
        "",
        "## All Devices",
        "",
        "| IP | MAC | Manufacturer | Category |",
        "|----|-----|--------------|----------|",
    ]
    for device in devices:
        lines.append(
            f"| {device.ip} | {device.mac} | {device.manufacturer or UNKNOWN_LABEL} "
            f"| {categorize_device(device)} |"
        )

    report = classifier.classify(devices)
    if report.flagged:
        lines += [
            "",
            "## Devices Requiring Review",
            "",
            "The following devices have been flagged for security review:",
            "",
            "| IP | MAC | Risk | Reason |",
            "|----|-----|------|--------|",
        ]
        for flagged in report.flagged:
            lines.append(
                f"| {flagged.device.ip} | {flagged.device.mac} "
                f"| {flagged.risk_level.value} | {flagged.flag_reason} |"
            )

    return "\n".join(lines) + "\n"
