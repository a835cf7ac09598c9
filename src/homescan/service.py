"""
homescan service - request handling and the HTTP API.

Every discovery is triggered on demand: there is no background loop.
Discovery order is always sweep (optional) -> ARP read -> parse ->
aggregate. Requests that replace the stored snapshot run under the
store lock, one at a time.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Optional

from aiohttp import web

from ._types import DiffResult, Device, FlagReport, Snapshot, UNKNOWN_LABEL
from .aggregator import aggregate
from .classifier import SecurityClassifier
from .config import HomescanConfig
from .discovery import ArpTableReader, PingSweeper
from .errors import CommandExecutionError, InvalidMacError, NoBaselineError
from .inventory import export_inventory, export_json, generate_discovery_report
from .oui import is_private_mac, normalize_mac, resolve_vendor
from .store import ScanStore

logger = logging.getLogger(__name__)


class HomescanService:
    """
    Owns the scan store and runs discovery, diff and flagging requests.
    """

    def __init__(
        self,
        config: HomescanConfig,
        reader: Optional[ArpTableReader] = None,
        sweeper: Optional[PingSweeper] = None,
        store: Optional[ScanStore] = None,
        classifier: Optional[SecurityClassifier] = None,
    ):
        """
        Initialize the service.

        Args:
            config: homescan configuration
            reader: ARP table reader (default built from config)
            sweeper: Ping sweeper (default built from config)
            store: Snapshot store (default: a fresh, empty store)
            classifier: Security classifier
        """
        self.config = config
        self.reader = reader or ArpTableReader(timeout=config.arp_timeout_seconds)
        self.sweeper = sweeper or PingSweeper(
            batch_size=config.sweep_batch_size,
            probe_timeout_ms=config.probe_timeout_ms,
            probe_deadline=config.probe_deadline_seconds,
        )
        self.store = store or ScanStore()
        self.classifier = classifier or SecurityClassifier()

        self._api_runner: Optional[web.AppRunner] = None
        self._shutdown_event = asyncio.Event()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def scan_devices(self, refresh: bool = False) -> list[Device]:
        """
        Run one discovery pass without touching the store.

        Raises:
            CommandExecutionError: if the ARP table cannot be read
        """
        started = time.monotonic()

        if refresh:
            logger.info(f"Sweeping {self.config.subnet}.0/24 before reading ARP table")
            await self.sweeper.sweep(self.config.subnet)

        entries = await self.reader.read_entries()
        devices = aggregate(entries)

        logger.info(
            f"Discovery found {len(devices)} devices "
            f"in {time.monotonic() - started:.1f}s"
        )
        return devices

    async def discover(self, refresh: bool = False) -> Snapshot:
        """Discover devices and make them the new baseline."""
        async with self.store.lock:
            devices = await self.scan_devices(refresh=refresh)
            return self.store.record(devices)

    async def diff(self) -> DiffResult:
        """
        Compare a fresh discovery with the baseline and advance it.

        Raises:
            NoBaselineError: if no discovery has run yet
        """
        async with self.store.lock:
            if not self.store.has_baseline:
                raise NoBaselineError()
            devices = await self.scan_devices()
            return self.store.diff(devices)

    async def get_device(self, ip: str) -> Optional[Device]:
        """Find a device by IP in a fresh discovery, or None."""
        devices = await self.scan_devices()
        return next((d for d in devices if d.ip == ip), None)

    def lookup_mac(self, mac: str) -> dict:
        """
        Resolve a MAC address to its manufacturer.

        Raises:
            InvalidMacError: for malformed MAC addresses
        """
        normalized = normalize_mac(mac)
        private = is_private_mac(normalized)
        result = {
            "mac": normalized,
            "manufacturer": resolve_vendor(normalized) or UNKNOWN_LABEL,
            "is_private_mac": private,
        }
        if private:
            result["note"] = (
                "This is a locally administered (private/randomized) MAC address, "
                "commonly used by phones and laptops for privacy."
            )
        return result

    async def flagged(self) -> FlagReport:
        devices = await self.scan_devices()
        return self.classifier.classify(devices)

    async def report(self) -> str:
        devices = await self.scan_devices()
        return generate_discovery_report(devices, classifier=self.classifier)

    async def export(self, fmt: str = "markdown") -> dict:
        """Export the current devices as inventory notes or JSON."""
        if fmt not in ("markdown", "json"):
            raise ValueError(f"Unsupported export format: {fmt}")

        devices = await self.scan_devices()
        if fmt == "json":
            return {"devices": export_json(devices)}

        items = export_inventory(devices)
        return {
            "item_count": len(items),
            "items": [item.to_dict() for item in items],
            "instructions": f"Save each item to your vault at {self.config.inventory_folder}/",
        }

    # -------------------------------------------------------------------------
    # API
    # -------------------------------------------------------------------------

    def build_app(self) -> web.Application:
        app = web.Application(middlewares=[error_middleware])
        app.router.add_post("/api/discover", self._handle_discover)
        app.router.add_get("/api/devices/{ip}", self._handle_get_device)
        app.router.add_get("/api/mac/{mac}", self._handle_mac_lookup)
        app.router.add_get("/api/report", self._handle_report)
        app.router.add_get("/api/export", self._handle_export)
        app.router.add_post("/api/diff", self._handle_diff)
        app.router.add_get("/api/flagged", self._handle_flagged)
        app.router.add_get("/api/health", self._handle_health)
        return app

    async def start(self) -> None:
        """Start the API server and wait until stopped."""
        logger.info("Starting homescan")

        self._api_runner = web.AppRunner(self.build_app())
        await self._api_runner.setup()
        site = web.TCPSite(self._api_runner, self.config.api_host, self.config.api_port)
        await site.start()
        logger.info(f"API server started on {self.config.api_host}:{self.config.api_port}")

        await self._shutdown_event.wait()

    async def stop(self) -> None:
        logger.info("Stopping homescan")
        self._shutdown_event.set()
        if self._api_runner:
            await self._api_runner.cleanup()
            self._api_runner = None

    async def _handle_discover(self, request: web.Request) -> web.Response:
        """Handle POST /api/discover."""
        data = await _json_body(request)
        refresh = data.get("refresh", False)
        if not isinstance(refresh, bool):
            raise web.HTTPBadRequest(
                text='{"status": "error", "message": "refresh must be a JSON boolean"}',
                content_type="application/json",
            )

        snapshot = await self.discover(refresh=refresh)

        return web.json_response({
            "scan_time": snapshot.taken_at.isoformat(),
            "subnet": self.config.subnet,
            "device_count": len(snapshot.devices),
            "devices": [d.to_dict() for d in snapshot.devices],
        })

    async def _handle_get_device(self, request: web.Request) -> web.Response:
        """Handle GET /api/devices/{ip}."""
        ip = request.match_info["ip"]
        device = await self.get_device(ip)

        if not device:
            return web.json_response(
                {
                    "status": "not_found",
                    "message": (
                        f"No device found at {ip}. It may be offline or not in the "
                        "ARP cache. Try a discovery with refresh=true first."
                    ),
                },
                status=404,
            )

        return web.json_response(device.to_dict())

    async def _handle_mac_lookup(self, request: web.Request) -> web.Response:
        """Handle GET /api/mac/{mac}."""
        return web.json_response(self.lookup_mac(request.match_info["mac"]))

    async def _handle_report(self, request: web.Request) -> web.Response:
        """Handle GET /api/report."""
        report = await self.report()
        return web.Response(text=report, content_type="text/markdown")

    async def _handle_export(self, request: web.Request) -> web.Response:
        """Handle GET /api/export."""
        fmt = request.query.get("format", "markdown")
        return web.json_response(await self.export(fmt))

    async def _handle_diff(self, request: web.Request) -> web.Response:
        """Handle POST /api/diff."""
        result = await self.diff()
        return web.json_response(result.to_dict())

    async def _handle_flagged(self, request: web.Request) -> web.Response:
        """Handle GET /api/flagged."""
        report = await self.flagged()
        return web.json_response(report.to_dict())

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Handle GET /api/health."""
        snapshot = self.store.current_snapshot()
        return web.json_response({
            "status": "ok",
            "service": "homescan",
            "subnet": self.config.subnet,
            "devices": len(snapshot.devices) if snapshot else 0,
            "last_scan": snapshot.taken_at.isoformat() if snapshot else None,
        })


async def _json_body(request: web.Request) -> dict:
    if not request.body_exists:
        return {}
    try:
        data = await request.json()
    except ValueError as e:
        raise web.HTTPBadRequest(
            text='{"status": "error", "message": "Request body is not valid JSON"}',
            content_type="application/json",
        ) from e
    return data if isinstance(data, dict) else {}


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Turn homescan errors into JSON error responses."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except NoBaselineError as e:
        return _error_response(str(e), status=409)
    except (InvalidMacError, ValueError) as e:
        return _error_response(str(e), status=400)
    except CommandExecutionError as e:
        logger.error(f"ARP table read failed: {e}")
        return _error_response(str(e), status=502)
    except Exception as e:
        logger.exception(f"Unhandled error in {request.method} {request.path}")
        return _error_response(str(e), status=500)


def _error_response(message: str, status: int) -> web.Response:
    return web.json_response({"status": "error", "message": message}, status=status)


def main():
    """Entry point for the homescan service."""
    import argparse

    parser = argparse.ArgumentParser(description="homescan - local network inventory")
    parser.add_argument("--config", type=str, help="Path to config file")
    parser.add_argument("--host", type=str, help="API host")
    parser.add_argument("--port", type=int, help="API port")
    parser.add_argument("--log-level", type=str, help="Log level")
    args = parser.parse_args()

    # Load configuration
    if args.config:
        config = HomescanConfig.from_yaml(Path(args.config))
    else:
        config = HomescanConfig.from_env()

    # Override with CLI args
    if args.host:
        config.api_host = args.host
    if args.port:
        config.api_port = args.port
    if args.log_level:
        config.log_level = args.log_level

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Validate
    errors = config.validate()
    for error in errors:
        logger.warning(f"Config error: {error}")
    if any("CRITICAL" in e for e in errors):
        sys.exit(1)

    service = HomescanService(config)

    # Handle signals
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def signal_handler():
        logger.info("Received shutdown signal")
        asyncio.create_task(service.stop())

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        loop.run_until_complete(service.start())
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        loop.run_until_complete(service.stop())
        loop.close()


if __name__ == "__main__":
    main()
