"""Helpers for safe logging.

Historical fetches carry the OVMS username and password as query
parameters, so URLs and request parameters must be redacted before they
reach the log.
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_CREDENTIAL_KEYS: frozenset[str] = frozenset({"username", "password"})

_REDACTED = "<redacted>"


def redact_params(params: Mapping[str, str]) -> dict[str, str]:
    """Return *params* with credential values replaced."""
    return {key: _REDACTED if key.lower() in _CREDENTIAL_KEYS else value for key, value in params.items()}


def redact_url(url: str) -> str:
    """Replace credential query parameter values in *url*."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = redact_params(dict(parse_qsl(parts.query, keep_blank_values=True)))
    return urlunsplit(parts._replace(query=urlencode(query, safe="<>")))
