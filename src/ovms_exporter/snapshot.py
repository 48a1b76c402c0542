"""Batch rendering of decoded records into an exposition snapshot."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from ovms_exporter.decoder import decode_record
from ovms_exporter.exceptions import OvmsConfigError, RecordDecodeError
from ovms_exporter.formatter import format_sample
from ovms_exporter.models.record import RawRecord
from ovms_exporter.schema import SchemaRegistry

_logger = logging.getLogger(__name__)


class RenderMode(StrEnum):
    GROUPED = "grouped"
    FLAT = "flat"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Snapshot:
    """Rendered exposition text for one successful refresh cycle."""

    text: str = ""
    sample_count: int = 0
    metric_count: int = 0
    skipped_records: int = 0
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def empty(cls) -> Snapshot:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.text


def compile_filter(pattern: str | re.Pattern[str] | None) -> re.Pattern[str] | None:
    """Compile a metric-name filter, raising :class:`OvmsConfigError` on bad syntax."""
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise OvmsConfigError(f"Invalid metric filter {pattern!r}: {exc}") from exc


class SnapshotBuilder:
    """Turn a batch of :class:`RawRecord` into a :class:`Snapshot`.

    Records that fail to decode are logged and skipped; the rest of the
    batch is still rendered.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        *,
        name_filter: str | re.Pattern[str] | None = None,
        mode: RenderMode = RenderMode.GROUPED,
    ) -> None:
        self._registry = registry
        self._filter = compile_filter(name_filter)
        self._mode = RenderMode(mode)

    @property
    def mode(self) -> RenderMode:
        return self._mode

    def _matches(self, name: str) -> bool:
        return self._filter is None or self._filter.search(name) is not None

    def build(self, records: Iterable[RawRecord]) -> Snapshot:
        grouped: dict[str, list[str]] = {}
        flat: list[str] = []
        skipped = 0
        total = 0

        for record in records:
            total += 1
            try:
                samples = decode_record(record, self._registry)
            except RecordDecodeError as exc:
                skipped += 1
                _logger.warning("Skipping record %d: %s", record.record_number, exc)
                continue
            for sample in samples:
                if not self._matches(sample.name):
                    continue
                line = format_sample(sample)
                grouped.setdefault(sample.name, []).append(line)
                flat.append(line)

        if self._mode == RenderMode.GROUPED:
            text = "".join(f"# TYPE {name} gauge\n" + "\n".join(lines) + "\n" for name, lines in grouped.items())
        else:
            text = "".join(f"{line}\n" for line in flat)

        _logger.info(
            "Rendered %d sample(s) in %d metric(s) from %d record(s), %d skipped",
            len(flat),
            len(grouped),
            total,
            skipped,
        )
        return Snapshot(
            text=text,
            sample_count=len(flat),
            metric_count=len(grouped),
            skipped_records=skipped,
        )
