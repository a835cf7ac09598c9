"""
Discovery for the local subnet.

- ARP table: read and parse the OS address resolution cache
- Ping sweep: probe every host of a /24 so the cache fills up
"""

from .arp_table import (
    ArpTableReader,
    ArpLineFormat,
    BSDLineFormat,
    LinuxLineFormat,
    LINE_FORMATS,
    parse_arp_line,
    parse_arp_lines,
    parse_arp_output,
)
from .sweep import PingSweeper, ping_command

__all__ = [
    "ArpTableReader",
    "ArpLineFormat",
    "BSDLineFormat",
    "LinuxLineFormat",
    "LINE_FORMATS",
    "parse_arp_line",
    "parse_arp_lines",
    "parse_arp_output",
    "PingSweeper",
    "ping_command",
]
