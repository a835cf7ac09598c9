"""
ARP table reading and parsing.

Reads the local ARP cache and turns its text into typed entries.
Fast but limited to hosts that have communicated recently; run a
ping sweep first to populate the cache.
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .._types import ArpEntry, BROADCAST_MAC, ParsedLine, ParseOutcome
from ..errors import CommandExecutionError, InvalidMacError
from ..oui import normalize_mac

logger = logging.getLogger(__name__)

INCOMPLETE_MARKERS = frozenset({"(incomplete)", "<incomplete>", "incomplete"})
MULTICAST_PREFIXES = ("224.", "239.")

_IP = r"(?P<ip>\d{1,3}(?:\.\d{1,3}){3})"


class ArpLineFormat(ABC):
    """One platform's `arp -a` line shape."""

    pattern: re.Pattern

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this line format."""
        pass

    def match(self, line: str) -> Optional[re.Match]:
        return self.pattern.search(line)


class LinuxLineFormat(ArpLineFormat):
    """
    net-tools format:

        ? (192.168.1.1) at aa:bb:cc:dd:ee:ff [ether] on eth0
        router (192.168.1.1) at aa:bb:cc:dd:ee:ff [ether] PERM on eth0
    """

    pattern = re.compile(
        r"^\s*\S+\s+\(" + _IP + r"\)\s+at\s+(?P<mac>\S+)\s+\[\w+\](?:\s+\w+)*?\s+on\s+(?P<iface>\S+)"
    )

    @property
    def name(self) -> str:
        return "linux"


class BSDLineFormat(ArpLineFormat):
    """
    BSD/macOS format:

        ? (192.168.1.1) at aa:bb:cc:dd:ee:ff on en0 ifscope [ethernet]
        ? (192.168.1.7) at (incomplete) on en0 ifscope [ethernet]
    """

    pattern = re.compile(
        r"^\s*\S+\s+\(" + _IP + r"\)\s+at\s+(?P<mac>\S+)\s+on\s+(?P<iface>\S+)"
    )

    @property
    def name(self) -> str:
        return "bsd"


# Tried in order; the first that matches decides
LINE_FORMATS: tuple[ArpLineFormat, ...] = (LinuxLineFormat(), BSDLineFormat())


def parse_arp_line(
    line: str,
    formats: Sequence[ArpLineFormat] = LINE_FORMATS,
) -> ParsedLine:
    """Parse a single ARP output line."""
    for line_format in formats:
        match = line_format.match(line)
        if not match:
            continue

        ip_address = match.group("ip")
        raw_mac = match.group("mac").lower()
        interface = match.group("iface")

        # Skip incomplete entries (no MAC)
        if raw_mac in INCOMPLETE_MARKERS:
            return ParsedLine(line, ParseOutcome.DROPPED, reason="incomplete")

        if ip_address.startswith(MULTICAST_PREFIXES):
            return ParsedLine(line, ParseOutcome.DROPPED, reason="multicast")

        try:
            mac_address = normalize_mac(raw_mac)
        except InvalidMacError:
            return ParsedLine(line, ParseOutcome.UNRECOGNIZED, reason=f"bad mac ({line_format.name})")

        if mac_address == BROADCAST_MAC:
            return ParsedLine(line, ParseOutcome.DROPPED, reason="broadcast")

        entry = ArpEntry(
            ip=ip_address,
            mac=mac_address,
            interface=interface,
            complete=True,
        )
        return ParsedLine(line, ParseOutcome.ENTRY, entry=entry)

    return ParsedLine(line, ParseOutcome.UNRECOGNIZED)


def parse_arp_lines(output: str) -> list[ParsedLine]:
    """Parse every non-blank line, keeping the outcome of each."""
    return [parse_arp_line(line) for line in output.splitlines() if line.strip()]


def parse_arp_output(output: str) -> list[ArpEntry]:
    """
    Parse `arp -a` output into entries.

    Entries come out in the order the text lists them. Incomplete,
    multicast and broadcast rows are dropped, as are lines in no
    known format.
    """
    entries = []
    unrecognized = 0

    for parsed in parse_arp_lines(output):
        if parsed.outcome == ParseOutcome.ENTRY and parsed.entry.complete:
            entries.append(parsed.entry)
        elif parsed.outcome == ParseOutcome.UNRECOGNIZED:
            unrecognized += 1
            logger.debug(f"Unrecognized ARP line: {parsed.line!r}")

    if unrecognized:
        logger.debug(f"Skipped {unrecognized} unrecognized ARP line(s)")

    return entries


class ArpTableReader:
    """
    Read the raw ARP cache from the operating system.

    No retries; callers decide whether to try again.
    """

    def __init__(
        self,
        command: Sequence[str] = ("arp", "-a"),
        timeout: float = 10.0,
    ):
        """
        Initialize the reader.

        Args:
            command: Command that lists the ARP cache
            timeout: Seconds to wait for the command before killing it
        """
        self.command = list(command)
        self.timeout = timeout

    async def read(self) -> str:
        """
        Run the ARP command and return its stdout.

        Raises:
            CommandExecutionError: if the command is missing, cannot be
                launched, exits non-zero or times out
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CommandExecutionError(self.command, stderr=str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise CommandExecutionError(
                self.command,
                stderr=f"timed out after {self.timeout}s",
            ) from e
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
            raise

        if process.returncode != 0:
            raise CommandExecutionError(
                self.command,
                exit_code=process.returncode,
                stderr=stderr.decode(errors="replace").strip(),
            )

        return stdout.decode(errors="replace")

    async def read_entries(self) -> list[ArpEntry]:
        """Read and parse the ARP cache."""
        output = await self.read()
        entries = parse_arp_output(output)
        logger.info(f"ARP table returned {len(entries)} entries")
        return entries
