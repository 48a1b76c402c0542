"""Decoded sample model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Sample:
    """One decoded field of one record.

    ``value`` is the raw payload string; numeric conversion happens only
    when the sample is formatted.
    """

    name: str
    value: str
    timestamp_ms: int
