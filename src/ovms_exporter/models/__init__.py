"""Typed models for OVMS records and decoded samples."""

from ovms_exporter.models.record import RawRecord, parse_records
from ovms_exporter.models.sample import Sample

__all__ = [
    "RawRecord",
    "Sample",
    "parse_records",
]
