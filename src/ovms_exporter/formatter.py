"""Prometheus exposition rendering of single samples."""

from __future__ import annotations

import math

from ovms_exporter.models.sample import Sample


def parse_number(value: str) -> float | None:
    """Return *value* as a float, or ``None`` when it is not numeric.

    Digit-group underscores (``"1_000"``) are rejected; Python accepts
    them but the exposition format does not.
    """
    if not value or "_" in value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _render_number(raw: str, number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    return raw


def format_sample(sample: Sample) -> str:
    """Render *sample* as one exposition line.

    Numeric values keep their original text, minus surrounding whitespace::

        ovms_S_ms_v_bat_soc 42.5 1700000000000

    Anything else becomes a ``value`` label on a constant ``1``, unchanged::

        ovms_S_ms_v_charge_state{value="stopped"} 1 1700000000000
    """
    number = parse_number(sample.value)
    if number is None:
        return f'{sample.name}{{value="{escape_label_value(sample.value)}"}} 1 {sample.timestamp_ms}'
    return f"{sample.name} {_render_number(sample.value.strip(), number)} {sample.timestamp_ms}"
