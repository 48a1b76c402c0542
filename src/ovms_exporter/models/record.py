"""Historical record model and batch parsing."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import Field, TypeAdapter, ValidationError

from ovms_exporter.exceptions import OvmsDecodeError
from ovms_exporter.models._base import OvmsBaseModel
from ovms_exporter.schema import MessageType

_logger = logging.getLogger(__name__)


class RawRecord(OvmsBaseModel):
    """One stored protocol message from ``/api/historical``.

    Parameters
    ----------
    data : str
        Comma-separated positional payload (``h_data``).
    record_number : int
        Server-side sequence number (``h_recordnumber``). Informational only.
    timestamp : str
        ``"YYYY-MM-DD HH:MM:SS"`` in UTC (``h_timestamp``).
    message_type : MessageType or None
        Message type the record was fetched for, when known.
    """

    data: str = Field(alias="h_data")
    record_number: int = Field(alias="h_recordnumber")
    timestamp: str = Field(alias="h_timestamp")
    message_type: MessageType | None = None


_RECORDS = TypeAdapter(list[RawRecord])


def parse_records(body: bytes | str, *, message_type: MessageType | None = None) -> list[RawRecord]:
    """Decode a historical API response body into typed records.

    *message_type*, when given, is attached to every record so the decoder
    can select its schema.

    Raises :class:`OvmsDecodeError` when the body is not valid JSON or is not
    an array of record objects.
    """
    try:
        payload: Any = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise OvmsDecodeError(f"Historical response is not JSON: {exc}") from exc

    if not isinstance(payload, list):
        raise OvmsDecodeError(f"Historical response is not a JSON array (got {type(payload).__name__})")

    try:
        records = _RECORDS.validate_python(payload)
    except ValidationError as exc:
        raise OvmsDecodeError(f"Unexpected historical record shape: {exc.error_count()} error(s)") from exc

    if message_type is not None:
        records = [record.model_copy(update={"message_type": message_type}) for record in records]
    _logger.debug("Parsed %d historical record(s) type=%s", len(records), message_type)
    return records
