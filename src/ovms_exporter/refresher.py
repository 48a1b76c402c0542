"""Refresh cycle: fetch, decode, render, publish."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ovms_exporter._transport import Transport
from ovms_exporter.cache import SnapshotCache
from ovms_exporter.exceptions import OvmsDecodeError, OvmsTransportError
from ovms_exporter.models.record import RawRecord, parse_records
from ovms_exporter.schema import MessageType
from ovms_exporter.snapshot import Snapshot, SnapshotBuilder

_logger = logging.getLogger(__name__)


class Refresher:
    """Owns one refresh cycle and the loop that repeats it.

    A cycle that fails to fetch or decode leaves *cache* untouched, so the
    previous snapshot keeps being served.
    """

    def __init__(
        self,
        transport: Transport,
        builder: SnapshotBuilder,
        cache: SnapshotCache,
        codes: Sequence[MessageType],
    ) -> None:
        self._transport = transport
        self._builder = builder
        self._cache = cache
        self._codes = tuple(codes)

    async def _fetch_records(self) -> list[RawRecord]:
        records: list[RawRecord] = []
        for code in self._codes:
            body = await self._transport.fetch_historical(code)
            batch = parse_records(body, message_type=code)
            _logger.info("num records (%s): %d", code.value, len(batch))
            records.extend(batch)
        return records

    async def refresh_once(self) -> bool:
        """Run one cycle. Returns ``True`` when a new snapshot was published."""
        try:
            records = await self._fetch_records()
        except OvmsTransportError as exc:
            _logger.warning("Fetch failed, keeping previous snapshot: %s", exc)
            return False
        except OvmsDecodeError as exc:
            _logger.warning("Decode failed, keeping previous snapshot: %s", exc)
            return False

        snapshot: Snapshot = self._builder.build(records)
        return self._cache.publish(snapshot)

    async def run(self, interval: float) -> None:
        """Refresh every *interval* seconds until cancelled."""
        while True:
            await self.refresh_once()
            _logger.info("Sleep for %.0fs...", interval)
            await asyncio.sleep(interval)
