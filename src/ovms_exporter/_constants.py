"""Internal constants shared across the package."""

DEFAULT_SERVER = "api.openvehicles.com:6868"
DEFAULT_ADDR = ":8080"
DEFAULT_FILTER = r"^v_b_12v_voltage$"
DEFAULT_POLL_INTERVAL_S = 20 * 60.0
DEFAULT_FETCH_TIMEOUT_S = 60.0

USER_AGENT = "ovms-exporter"

# Historical records carry a naive UTC wall-clock timestamp.
RECORD_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

HISTORICAL_PATH = "/api/historical/{vehicle_id}/{code}"

# Prometheus text exposition format, as prometheus_client.CONTENT_TYPE_LATEST.
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"
