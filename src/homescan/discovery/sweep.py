"""
Ping sweep to populate the ARP cache.

Hosts that have not talked to us recently are missing from the ARP
cache. One echo request each makes the kernel resolve them, so the
next ARP table read sees them. Results are ignored.
"""

from __future__ import annotations

import asyncio
import logging
import math
import sys
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

HOST_SUFFIXES = range(1, 255)

Probe = Callable[[str], Awaitable[object]]


def ping_command(ip: str, timeout_ms: int, platform: str = sys.platform) -> list[str]:
    """Build a single-echo ping command for the current platform."""
    if platform == "darwin" or "bsd" in platform:
        # BSD ping takes -W in milliseconds
        return ["ping", "-c", "1", "-W", str(timeout_ms), ip]
    # iputils and BusyBox ping take -W in whole seconds; probe_deadline bounds it tighter
    return ["ping", "-c", "1", "-W", str(max(1, math.ceil(timeout_ms / 1000))), ip]


class PingSweeper:
    """
    Probe every host of a /24 in fixed-size batches.

    Probes within a batch run concurrently; batches run one after
    another, so at most `batch_size` probes are ever in flight.
    """

    def __init__(
        self,
        batch_size: int = 50,
        probe_timeout_ms: int = 100,
        probe_deadline: float = 1.0,
        probe: Optional[Probe] = None,
    ):
        """
        Initialize the sweeper.

        Args:
            batch_size: Probes run concurrently per batch
            probe_timeout_ms: Echo reply timeout passed to ping
            probe_deadline: Seconds before a ping process is killed
            probe: Coroutine function probing one IP (default: ping)
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.batch_size = batch_size
        self.probe_timeout_ms = probe_timeout_ms
        self.probe_deadline = probe_deadline
        self.probe = probe or self._ping_host

    @staticmethod
    def targets(subnet_prefix: str) -> list[str]:
        """Hosts .1 through .254 of a three-octet prefix, used verbatim."""
        return [f"{subnet_prefix}.{suffix}" for suffix in HOST_SUFFIXES]

    def batches(self, subnet_prefix: str) -> list[list[str]]:
        targets = self.targets(subnet_prefix)
        return [
            targets[i:i + self.batch_size]
            for i in range(0, len(targets), self.batch_size)
        ]

    async def sweep(self, subnet_prefix: str) -> None:
        """
        Ping every host in the subnet.

        Returns once the last batch has settled. Individual probe
        failures are ignored; the sweep as a whole never fails.
        Cancelling the caller cancels the batch in flight.
        """
        started = time.monotonic()
        batches = self.batches(subnet_prefix)

        for index, batch in enumerate(batches, start=1):
            logger.debug(f"Ping sweep batch {index}/{len(batches)} ({len(batch)} hosts)")
            await asyncio.gather(
                *(self.probe(ip) for ip in batch),
                return_exceptions=True,
            )

        logger.info(
            f"Ping sweep of {subnet_prefix}.0/24 finished in "
            f"{time.monotonic() - started:.1f}s"
        )

    async def _ping_host(self, ip: str) -> bool:
        """Ping a single host."""
        try:
            process = await asyncio.create_subprocess_exec(
                *ping_command(ip, self.probe_timeout_ms),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError:
            return False

        try:
            await asyncio.wait_for(process.wait(), timeout=self.probe_deadline)
        except asyncio.TimeoutError:
            _kill(process)
            await process.wait()
            return False
        except asyncio.CancelledError:
            _kill(process)
            raise

        return process.returncode == 0


def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
