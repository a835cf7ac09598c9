"""
homescan configuration.

Loaded from environment variables or a YAML file. Every setting has a
default so the scanner runs with no configuration at all.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SUBNET_PREFIX = re.compile(r"^(25[0-5]|2[0-4]\d|1?\d?\d)(\.(25[0-5]|2[0-4]\d|1?\d?\d)){2}$")


@dataclass
class HomescanConfig:
    """Network scan configuration."""

    # Three-octet prefix of the /24 to sweep (e.g. "192.168.1")
    subnet: str = "192.168.1"

    # Ping sweep
    sweep_batch_size: int = 50
    probe_timeout_ms: int = 100
    probe_deadline_seconds: float = 1.0

    # ARP table read
    arp_timeout_seconds: float = 10.0

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8083

    # Where exported notes are meant to be saved in the vault
    inventory_folder: str = "Inventory/Items"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "HomescanConfig":
        """Load configuration from environment variables."""
        config = cls()

        config.subnet = os.getenv("HOMESCAN_SUBNET", config.subnet).strip()

        # Ping sweep
        config.sweep_batch_size = int(os.getenv("HOMESCAN_SWEEP_BATCH_SIZE", str(config.sweep_batch_size)))
        config.probe_timeout_ms = int(os.getenv("HOMESCAN_PROBE_TIMEOUT_MS", str(config.probe_timeout_ms)))

        config.arp_timeout_seconds = float(os.getenv("HOMESCAN_ARP_TIMEOUT", str(config.arp_timeout_seconds)))

        # API server
        config.api_host = os.getenv("API_HOST", config.api_host)
        config.api_port = int(os.getenv("API_PORT", str(config.api_port)))

        if folder := os.getenv("HOMESCAN_INVENTORY_FOLDER"):
            config.inventory_folder = folder

        # Logging
        config.log_level = os.getenv("LOG_LEVEL", "INFO")

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "HomescanConfig":
        """Load configuration from YAML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}, using defaults")
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        config = cls()

        if "subnet" in data:
            config.subnet = str(data["subnet"]).strip()

        if "sweep" in data:
            s = data["sweep"]
            config.sweep_batch_size = s.get("batch_size", config.sweep_batch_size)
            config.probe_timeout_ms = s.get("probe_timeout_ms", config.probe_timeout_ms)
            config.probe_deadline_seconds = s.get("probe_deadline_seconds", config.probe_deadline_seconds)

        if "arp" in data:
            config.arp_timeout_seconds = data["arp"].get("timeout_seconds", config.arp_timeout_seconds)

        if "api" in data:
            a = data["api"]
            config.api_host = a.get("host", "127.0.0.1")
            config.api_port = a.get("port", 8083)

        if "inventory" in data:
            config.inventory_folder = data["inventory"].get("folder", config.inventory_folder)

        config.log_level = data.get("log_level", "INFO")

        return config

    def validate(self) -> list[str]:
        """
        Validate configuration, returning list of errors.

        Errors tagged CRITICAL stop startup; the rest are warnings.
        """
        errors = []

        if not _SUBNET_PREFIX.match(self.subnet):
            errors.append(f"Subnet should be a three-octet prefix like 192.168.1, got {self.subnet!r}")

        if self.sweep_batch_size < 1:
            errors.append(f"CRITICAL: Invalid sweep batch size: {self.sweep_batch_size}")

        if self.probe_timeout_ms < 1:
            errors.append(f"CRITICAL: Invalid probe timeout: {self.probe_timeout_ms}ms")

        if not 0 < self.api_port < 65536:
            errors.append(f"CRITICAL: Invalid API port: {self.api_port}")

        return errors


# Example homescan.yaml:
"""
subnet: "192.168.1"

sweep:
  batch_size: 50
  probe_timeout_ms: 100
  probe_deadline_seconds: 1.0

arp:
  timeout_seconds: 10

api:
  host: "127.0.0.1"
  port: 8083

inventory:
  folder: "Inventory/Items"

log_level: "INFO"
"""
