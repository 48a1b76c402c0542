"""Command line entry point.

Usage::

    ovms-exporter --vehicle DEMO --username me --password secret
    python -m ovms_exporter --schema-mode multi --filter '' --render-mode flat

Every flag falls back to the matching ``OVMS_*`` environment variable.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import re
from collections.abc import Sequence
from typing import Any

import aiohttp

from ovms_exporter import __version__
from ovms_exporter._transport import HistoricalTransport
from ovms_exporter.cache import SnapshotCache
from ovms_exporter.config import ExporterConfig
from ovms_exporter.exceptions import OvmsConfigError
from ovms_exporter.refresher import Refresher
from ovms_exporter.server import create_app, start_server
from ovms_exporter.snapshot import RenderMode, SnapshotBuilder

_logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}


def parse_duration(value: str) -> float:
    """Parse ``"20m"``, ``"90s"``, ``"1.5h"`` or plain seconds into seconds."""
    match = _DURATION_RE.match(value)
    if match is None:
        raise argparse.ArgumentTypeError(f"invalid duration {value!r} (expected e.g. 90s, 20m, 1h)")
    amount, unit = match.groups()
    seconds = float(amount) * _DURATION_UNITS[unit]
    if seconds <= 0:
        raise argparse.ArgumentTypeError("duration must be positive")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ovms-exporter",
        description="Export OVMS vehicle telemetry as Prometheus metrics.",
    )
    parser.add_argument("--addr", help="Address to listen on (default :8080)")
    parser.add_argument(
        "--filter",
        dest="name_filter",
        help="Regular expression to use for filtering the exported metrics ('' exports everything)",
    )
    parser.add_argument("--username", help="OVMS server username")
    parser.add_argument("--password", help="OVMS server password")
    parser.add_argument("--vehicle", dest="vehicle_id", help="OVMS vehicle ID")
    parser.add_argument("--server", help="OVMS server host:port")
    parser.add_argument(
        "--poll-duration",
        dest="poll_interval",
        type=parse_duration,
        help="How frequently to poll the OVMS server (default 20m)",
    )
    parser.add_argument("--fetch-timeout", type=parse_duration, help="Deadline for one fetch (default 60s)")
    parser.add_argument("--schema-mode", choices=["single", "multi"], help="Message types to decode")
    parser.add_argument("--render-mode", choices=[mode.value for mode in RenderMode], help="Exposition layout")
    parser.add_argument("--log-level", help="Logging level (default INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_from_args(argv: Sequence[str] | None = None) -> ExporterConfig:
    args = build_parser().parse_args(argv)
    overrides: dict[str, Any] = {key: value for key, value in vars(args).items() if value is not None}
    return ExporterConfig.from_env(**overrides)


async def serve(config: ExporterConfig) -> None:
    """Run the refresh loop and the HTTP endpoint until cancelled."""
    registry = config.registry
    cache = SnapshotCache()
    builder = SnapshotBuilder(registry, name_filter=config.name_filter, mode=config.render_mode)
    host, port = config.listen_address
    _logger.info("filter: %r schema: %s", config.name_filter, config.schema_mode)

    async with aiohttp.ClientSession() as http_session:
        refresher = Refresher(HistoricalTransport(config, http_session), builder, cache, registry.codes)
        runner = await start_server(create_app(cache), host, port)
        task = asyncio.create_task(refresher.run(config.poll_interval))
        try:
            await task
        finally:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            await runner.cleanup()


def main(argv: Sequence[str] | None = None) -> int:
    try:
        config = config_from_args(argv)
    except OvmsConfigError as exc:
        build_parser().error(str(exc))

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if not config.vehicle_id:
        _logger.warning("No vehicle ID configured; fetches will fail until --vehicle is set")

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(serve(config))
    return 0
