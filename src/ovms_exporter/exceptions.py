"""Custom exception hierarchy for ovms_exporter."""

from __future__ import annotations


class OvmsError(Exception):
    """Base exception for all ovms_exporter errors."""


class OvmsConfigError(OvmsError):
    """Invalid or missing configuration."""


class RecordDecodeError(OvmsError):
    """A single record could not be decoded.

    The snapshot builder absorbs these per record; the rest of the batch
    is still rendered.
    """

    def __init__(self, message: str, *, record_number: int | None = None) -> None:
        self.record_number = record_number
        super().__init__(message)


class SchemaLookupError(RecordDecodeError):
    """No schema is registered for the record's message-type code."""

    def __init__(self, code: str | None, *, record_number: int | None = None) -> None:
        self.code = code
        super().__init__(f"No schema for message type {code!r}", record_number=record_number)


class TimestampParseError(RecordDecodeError):
    """The record timestamp does not match ``YYYY-MM-DD HH:MM:SS``."""

    def __init__(self, value: str, *, record_number: int | None = None) -> None:
        self.value = value
        super().__init__(f"Invalid record timestamp {value!r}", record_number=record_number)


class OvmsTransportError(OvmsError):
    """HTTP-level failure (network, non-200, timeout)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class OvmsDecodeError(OvmsError):
    """Response body is not a JSON array of historical records."""
