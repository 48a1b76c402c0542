"""Exporter configuration."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from ovms_exporter._constants import (
    DEFAULT_ADDR,
    DEFAULT_FETCH_TIMEOUT_S,
    DEFAULT_FILTER,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_SERVER,
)
from ovms_exporter.exceptions import OvmsConfigError
from ovms_exporter.schema import REGISTRIES, SchemaRegistry
from ovms_exporter.snapshot import RenderMode, compile_filter


def parse_listen_addr(addr: str) -> tuple[str, int]:
    """Split ``"host:port"`` (host optional, as in ``":8080"``)."""
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise OvmsConfigError(f"Listen address {addr!r} must be [host]:port")
    try:
        port_number = int(port)
    except ValueError:
        raise OvmsConfigError(f"Invalid port in listen address {addr!r}") from None
    return host.strip("[]") or "0.0.0.0", port_number


@dataclasses.dataclass(frozen=True)
class ExporterConfig:
    """Exporter configuration.

    Parameters
    ----------
    vehicle_id : str
        OVMS vehicle identifier.
    username : str
        OVMS server username.
    password : str
        OVMS server password.  Only forwarded to the server.
    server : str
        OVMS server ``host:port``.
    addr : str
        ``[host]:port`` the ``/metrics`` endpoint listens on.
    name_filter : str or None
        Regular expression matched against exported metric names.  ``None``
        or ``""`` exports everything.
    poll_interval : float
        Seconds between refresh cycles.
    fetch_timeout : float
        Deadline in seconds for one historical fetch.
    schema_mode : str
        ``"single"`` (environment message only) or ``"multi"`` (S/D/L/W).
    render_mode : RenderMode
        ``grouped`` (with ``# TYPE`` headers) or ``flat``.
    log_level : str
        Root logging level name.
    """

    vehicle_id: str = ""
    username: str = ""
    password: str = ""
    server: str = DEFAULT_SERVER
    addr: str = DEFAULT_ADDR
    name_filter: str | None = DEFAULT_FILTER
    poll_interval: float = DEFAULT_POLL_INTERVAL_S
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_S
    schema_mode: str = "single"
    render_mode: RenderMode = RenderMode.GROUPED
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.schema_mode not in REGISTRIES:
            raise OvmsConfigError(f"Unknown schema mode {self.schema_mode!r} (expected one of {sorted(REGISTRIES)})")
        try:
            object.__setattr__(self, "render_mode", RenderMode(self.render_mode))
        except ValueError:
            raise OvmsConfigError(f"Unknown render mode {self.render_mode!r}") from None
        if self.poll_interval <= 0:
            raise OvmsConfigError("poll_interval must be positive")
        if self.fetch_timeout <= 0:
            raise OvmsConfigError("fetch_timeout must be positive")
        if self.name_filter == "":
            object.__setattr__(self, "name_filter", None)
        compile_filter(self.name_filter)
        parse_listen_addr(self.addr)

    @property
    def registry(self) -> SchemaRegistry:
        return REGISTRIES[self.schema_mode]

    @property
    def listen_address(self) -> tuple[str, int]:
        return parse_listen_addr(self.addr)

    @classmethod
    def from_env(cls, **overrides: Any) -> ExporterConfig:
        """Create configuration from ``OVMS_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "OVMS_VEHICLE_ID": "vehicle_id",
            "OVMS_USERNAME": "username",
            "OVMS_PASSWORD": "password",
            "OVMS_SERVER": "server",
            "OVMS_ADDR": "addr",
            "OVMS_FILTER": "name_filter",
            "OVMS_SCHEMA_MODE": "schema_mode",
            "OVMS_RENDER_MODE": "render_mode",
            "OVMS_LOG_LEVEL": "log_level",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric settings, handled separately
        for env_key, field_name in (
            ("OVMS_POLL_INTERVAL", "poll_interval"),
            ("OVMS_FETCH_TIMEOUT", "fetch_timeout"),
        ):
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                try:
                    config_kwargs[field_name] = float(val)
                except ValueError:
                    raise OvmsConfigError(f"{env_key} must be a number of seconds, got {val!r}") from None

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
