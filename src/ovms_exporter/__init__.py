"""ovms_exporter - Prometheus exporter for OVMS vehicle telemetry."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ovms-exporter")
except PackageNotFoundError:
    __version__ = "0+local"
from ovms_exporter.cache import SnapshotCache
from ovms_exporter.config import ExporterConfig
from ovms_exporter.decoder import decode_record, parse_timestamp
from ovms_exporter.exceptions import (
    OvmsConfigError,
    OvmsDecodeError,
    OvmsError,
    OvmsTransportError,
    RecordDecodeError,
    SchemaLookupError,
    TimestampParseError,
)
from ovms_exporter.formatter import format_sample
from ovms_exporter.models import RawRecord, Sample, parse_records
from ovms_exporter.refresher import Refresher
from ovms_exporter.schema import (
    MULTI_SCHEMA_REGISTRY,
    SINGLE_SCHEMA_REGISTRY,
    MessageType,
    SchemaRegistry,
    normalize_metric_name,
)
from ovms_exporter.snapshot import RenderMode, Snapshot, SnapshotBuilder

__all__ = [
    "__version__",
    "ExporterConfig",
    "MULTI_SCHEMA_REGISTRY",
    "MessageType",
    "OvmsConfigError",
    "OvmsDecodeError",
    "OvmsError",
    "OvmsTransportError",
    "RawRecord",
    "RecordDecodeError",
    "Refresher",
    "RenderMode",
    "SINGLE_SCHEMA_REGISTRY",
    "Sample",
    "SchemaLookupError",
    "SchemaRegistry",
    "Snapshot",
    "SnapshotBuilder",
    "SnapshotCache",
    "TimestampParseError",
    "decode_record",
    "format_sample",
    "normalize_metric_name",
    "parse_records",
    "parse_timestamp",
]
