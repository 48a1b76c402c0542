"""Positional decoding of historical records into samples."""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime

from ovms_exporter._constants import RECORD_TIMESTAMP_FORMAT
from ovms_exporter.exceptions import TimestampParseError
from ovms_exporter.models.record import RawRecord
from ovms_exporter.models.sample import Sample
from ovms_exporter.schema import SchemaRegistry

_logger = logging.getLogger(__name__)

_TIMESTAMP_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")


def parse_timestamp(value: str, *, record_number: int | None = None) -> datetime:
    """Parse a record timestamp as UTC wall-clock time."""
    if not isinstance(value, str) or _TIMESTAMP_RE.fullmatch(value) is None:
        raise TimestampParseError(value, record_number=record_number)
    try:
        parsed = datetime.strptime(value, RECORD_TIMESTAMP_FORMAT)
    except ValueError:
        raise TimestampParseError(value, record_number=record_number) from None
    return parsed.replace(tzinfo=UTC)


def to_epoch_ms(value: datetime) -> int:
    return int(value.timestamp()) * 1000


def decode_record(record: RawRecord, registry: SchemaRegistry) -> list[Sample]:
    """Decode *record* into one :class:`Sample` per exported field.

    The message type comes from the record tag, then from a leading code in
    the payload, then from the registry default.  Payload fields without a
    schema slot are dropped; schema slots without a payload field are
    skipped.

    Raises :class:`~ovms_exporter.exceptions.SchemaLookupError` or
    :class:`~ovms_exporter.exceptions.TimestampParseError`.
    """
    payload = record.data
    code = record.message_type
    if code is None:
        code, payload = registry.split_message_type(payload)
    message_type = registry.resolve(code, record_number=record.record_number)
    schema = registry.schemas[message_type]

    ts = parse_timestamp(record.timestamp, record_number=record.record_number)
    ts_ms = to_epoch_ms(ts)

    if not payload:
        return []

    values = payload.split(",")
    if len(values) > len(schema):
        _logger.debug(
            "Record %d (%s) has %d fields, schema has %d; dropping the rest",
            record.record_number,
            message_type.value,
            len(values),
            len(schema),
        )

    samples: list[Sample] = []
    for index, (slot, value) in enumerate(zip(schema, values, strict=False)):
        if not slot:
            continue
        name = registry.metric_name(message_type, slot)
        _logger.debug("%s [%d]: %s=%r", ts, index, name, value)
        samples.append(Sample(name=name, value=value, timestamp_ms=ts_ms))
    return samples
