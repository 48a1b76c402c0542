"""Positional schemas for OVMS historical records.

Every OVMS protocol message is a comma-separated list of values whose
meaning depends only on the field position.  A schema is the ordered
tuple of metric names for one message type; an empty name marks a
position that is not exported.

Two registries ship with the package:

* :data:`SINGLE_SCHEMA_REGISTRY` exports the environment (``D``) message
  only, using the OVMS metric names (``v.b.12v.voltage`` ->
  ``v_b_12v_voltage``).  Records without a type code use this schema.
* :data:`MULTI_SCHEMA_REGISTRY` exports the status, environment, location
  and tyre messages (``S``/``D``/``L``/``W``) and prefixes every metric
  with ``ovms_<code>_`` (``ovms_S_ms_v_bat_soc``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from ovms_exporter.exceptions import SchemaLookupError

MetricSchema = tuple[str, ...]


class MessageType(StrEnum):
    STATUS = "S"
    ENVIRONMENT = "D"
    LOCATION = "L"
    TYRES = "W"


def normalize_metric_name(name: str) -> str:
    """Prometheus doesn't allow ``.`` in metric names."""
    return name.replace(".", "_")


def _schema(names: Iterable[str]) -> MetricSchema:
    return tuple(normalize_metric_name(name) for name in names)


ENVIRONMENT_SCHEMA: MetricSchema = _schema(
    [
        "",  # 1 door state #1
        "",  # 2 door state #2
        "",  # 3 lock/unlock state
        "",  # 4 PEM temperature (C)
        "v.m.temp",  # 5 motor temperature (C)
        "v.b.temp",  # 6 battery temperature (C)
        "v.p.trip",  # 7 trip meter (1/10 distance unit)
        "v.p.odometer",  # 8 odometer (1/10 distance unit)
        "v.p.speed",  # 9 speed (distance units per hour)
        "v.e.parktime",  # 10 parking timer (seconds, 0 when not parked)
        "v.e.temp",  # 11 ambient temperature (C)
        "",  # 12 door state #3
        "",  # 13 stale PEM/motor/battery temps indicator
        "",  # 14 stale ambient temp indicator
        "v.b.12v.voltage",  # 15 12V line voltage
        "",  # 16 door state #4
        "v.b.12v.voltage.ref",  # 17 12V reference voltage
        "",  # 18 door state #5
        "v.c.temp",  # 19 charger temperature (C)
        "v.b.12v.current",  # 20 12V current (DC converter output)
        "v.e.cabintemp",  # 21 cabin temperature (C)
    ]
)

STATUS_SCHEMA_V2: MetricSchema = _schema(
    [
        "ms.v.bat.soc",  # 1 state of charge (%)
        "",  # 2 distance units (K/M)
        "ms.v.charge.voltage",  # 3 charge line voltage
        "ms.v.charge.current",  # 4 charge current
        "ms.v.charge.state",  # 5 charge state (charging, done, stopped, ...)
        "ms.v.charge.mode",  # 6 charge mode (standard, range, ...)
        "ms.v.bat.range.ideal",  # 7 ideal range
        "ms.v.bat.range.est",  # 8 estimated range
        "ms.v.charge.climit",  # 9 charge current limit
        "ms.v.charge.time",  # 10 charge duration (seconds)
        "",  # 11 charger B4 byte
        "ms.v.charge.kwh",  # 12 energy charged (1/10 kWh)
        "ms.v.charge.substate",  # 13 charge sub-state
        "",  # 14 charge state (numeric)
        "",  # 15 charge mode (numeric)
        "ms.v.charge.timermode",  # 16 charge timer enabled
        "ms.v.charge.timerstart",  # 17 charge timer start
        "",  # 18 stale charge timer indicator
        "ms.v.bat.cac",  # 19 battery capacity (Ah)
        "ms.v.charge.duration.full",  # 20 minutes to full
        "ms.v.charge.duration.range",  # 21 minutes to range limit
        "ms.v.charge.duration.soc",  # 22 minutes to SOC limit
        "ms.v.charge.inprogress",  # 23 charging in progress
        "ms.v.charge.limit.range",  # 24 range limit
        "ms.v.charge.limit.soc",  # 25 SOC limit
        "ms.v.env.cooling",  # 26 cooldown active
        "",  # 27 cooldown battery temperature limit
        "",  # 28 cooldown time limit
        "",  # 29 charge estimate
        "ms.v.bat.range.full",  # 30 full range
        "ms.v.bat.power",  # 31 battery power (kW)
        "ms.v.bat.voltage",  # 32 battery voltage
        "ms.v.bat.soh",  # 33 state of health (%)
        "ms.v.charge.power",  # 34 charge power (kW)
        "ms.v.charge.efficiency",  # 35 charge efficiency (%)
    ]
)

ENVIRONMENT_SCHEMA_V2: MetricSchema = _schema(
    [
        "",  # 1 door state #1
        "",  # 2 door state #2
        "",  # 3 lock/unlock state
        "ms.v.inv.temp",  # 4 inverter temperature (C)
        "ms.v.mot.temp",  # 5 motor temperature (C)
        "ms.v.bat.temp",  # 6 battery temperature (C)
        "ms.v.pos.trip",  # 7 trip meter
        "ms.v.pos.odometer",  # 8 odometer
        "ms.v.pos.speed",  # 9 speed
        "ms.v.env.parktime",  # 10 parking timer (seconds)
        "ms.v.env.temp",  # 11 ambient temperature (C)
        "",  # 12 door state #3
        "",  # 13 stale temps indicator
        "",  # 14 stale ambient indicator
        "ms.v.bat.12v.voltage",  # 15 12V line voltage
        "",  # 16 door state #4
        "ms.v.bat.12v.voltage.ref",  # 17 12V reference voltage
        "",  # 18 door state #5
        "ms.v.charge.temp",  # 19 charger temperature (C)
        "ms.v.bat.12v.current",  # 20 12V current
        "ms.v.env.cabintemp",  # 21 cabin temperature (C)
    ]
)

LOCATION_SCHEMA_V2: MetricSchema = _schema(
    [
        "ms.v.pos.latitude",  # 1 latitude
        "ms.v.pos.longitude",  # 2 longitude
        "ms.v.pos.direction",  # 3 heading (degrees)
        "ms.v.pos.altitude",  # 4 altitude (m)
        "ms.v.pos.gpslock",  # 5 GPS lock
        "",  # 6 stale GPS indicator
        "ms.v.pos.speed",  # 7 speed
        "ms.v.pos.trip",  # 8 trip meter
        "ms.v.env.drivemode",  # 9 drive mode
        "ms.v.bat.power",  # 10 battery power (kW)
        "ms.v.bat.energy.used",  # 11 energy used (Wh)
        "ms.v.bat.energy.recd",  # 12 energy recovered (Wh)
        "ms.v.inv.power",  # 13 inverter power (kW)
        "ms.v.inv.efficiency",  # 14 inverter efficiency (%)
        "ms.v.pos.gpsmode",  # 15 GPS mode indicator
        "ms.v.pos.satcount",  # 16 satellite count
        "ms.v.pos.gpshdop",  # 17 horizontal dilution of precision
        "ms.v.pos.gpsspeed",  # 18 GPS speed
    ]
)

TYRES_SCHEMA_V2: MetricSchema = _schema(
    [
        "ms.v.tpms.fr.p",  # 1 front right pressure (psi)
        "ms.v.tpms.fr.t",  # 2 front right temperature (C)
        "ms.v.tpms.rr.p",  # 3 rear right pressure (psi)
        "ms.v.tpms.rr.t",  # 4 rear right temperature (C)
        "ms.v.tpms.fl.p",  # 5 front left pressure (psi)
        "ms.v.tpms.fl.t",  # 6 front left temperature (C)
        "ms.v.tpms.rl.p",  # 7 rear left pressure (psi)
        "ms.v.tpms.rl.t",  # 8 rear left temperature (C)
        "",  # 9 stale TPMS indicator
    ]
)


@dataclass(frozen=True)
class SchemaRegistry:
    """Read-only lookup from message-type code to :data:`MetricSchema`.

    Parameters
    ----------
    schemas : Mapping[MessageType, MetricSchema]
        One positional schema per supported message type.
    default : MessageType or None
        Message type assumed for records that carry no type code.
    prefix : str
        Template prepended to every metric name; ``{code}`` is replaced
        with the message-type code.
    """

    schemas: Mapping[MessageType, MetricSchema]
    default: MessageType | None = None
    prefix: str = ""
    _names: Mapping[tuple[MessageType, str], str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.default is not None and self.default not in self.schemas:
            raise ValueError(f"default message type {self.default!r} has no schema")
        object.__setattr__(self, "schemas", MappingProxyType(dict(self.schemas)))
        names: dict[tuple[MessageType, str], str] = {}
        for code, schema in self.schemas.items():
            for slot in schema:
                if slot:
                    prefix = self.prefix.format(code=code.value)
                    names[(code, slot)] = normalize_metric_name(f"{prefix}{slot}")
        object.__setattr__(self, "_names", MappingProxyType(names))

    @property
    def codes(self) -> tuple[MessageType, ...]:
        return tuple(self.schemas)

    def resolve(self, code: MessageType | str | None, *, record_number: int | None = None) -> MessageType:
        """Return the :class:`MessageType` for *code*, falling back to the default.

        Raises :class:`SchemaLookupError` for unknown codes, or when *code*
        is ``None`` and the registry has no default.
        """
        if code is None or code == "":
            if self.default is None:
                raise SchemaLookupError(None, record_number=record_number)
            return self.default
        try:
            message_type = MessageType(code)
        except ValueError:
            raise SchemaLookupError(str(code), record_number=record_number) from None
        if message_type not in self.schemas:
            raise SchemaLookupError(message_type.value, record_number=record_number)
        return message_type

    def lookup(self, code: MessageType | str | None) -> MetricSchema:
        return self.schemas[self.resolve(code)]

    def metric_name(self, code: MessageType, slot: str) -> str:
        """Full exported name for a non-empty *slot* of *code*'s schema."""
        return self._names[(code, slot)]

    def split_message_type(self, payload: str) -> tuple[MessageType | None, str]:
        """Split a leading ``"<code>,"`` prefix off *payload*.

        Returns ``(None, payload)`` when the payload does not start with a
        code this registry knows.
        """
        head, _, rest = payload.partition(",")
        head = head.strip()
        if len(head) == 1 and head in {code.value for code in self.schemas}:
            return MessageType(head), rest
        return None, payload


SINGLE_SCHEMA_REGISTRY = SchemaRegistry(
    schemas={MessageType.ENVIRONMENT: ENVIRONMENT_SCHEMA},
    default=MessageType.ENVIRONMENT,
)

MULTI_SCHEMA_REGISTRY = SchemaRegistry(
    schemas={
        MessageType.STATUS: STATUS_SCHEMA_V2,
        MessageType.ENVIRONMENT: ENVIRONMENT_SCHEMA_V2,
        MessageType.LOCATION: LOCATION_SCHEMA_V2,
        MessageType.TYRES: TYRES_SCHEMA_V2,
    },
    prefix="ovms_{code}_",
)

REGISTRIES: dict[str, SchemaRegistry] = {
    "single": SINGLE_SCHEMA_REGISTRY,
    "multi": MULTI_SCHEMA_REGISTRY,
}
