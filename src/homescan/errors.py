"""
Exceptions raised by homescan.

Parsing never raises; malformed address table lines are dropped.
A device lookup that finds nothing returns None rather than raising.
"""

from __future__ import annotations

from typing import Optional


class HomescanError(Exception):
    """Base exception for homescan errors."""
    pass


class CommandExecutionError(HomescanError):
    """Error raised when an external command cannot be run or fails."""

    def __init__(self, cmd: list, exit_code: Optional[int] = None, stderr: str = ""):
        self.cmd = cmd
        self.exit_code = exit_code
        self.stderr = stderr
        if exit_code is None:
            message = f"Command {cmd} could not be run: {stderr}"
        else:
            message = f"Command {cmd} failed with exit code {exit_code}: {stderr}"
        super().__init__(message)


class NoBaselineError(HomescanError):
    """A diff was requested before any discovery established a baseline."""

    def __init__(self, message: str = "No previous scan found. Run a discovery first to establish a baseline."):
        super().__init__(message)


class InvalidMacError(HomescanError, ValueError):
    """A link-layer address is not a well-formed 6-octet MAC."""

    def __init__(self, mac: str):
        self.mac = mac
        super().__init__(f"Invalid MAC address: {mac!r}")
