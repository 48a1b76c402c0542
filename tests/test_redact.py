from __future__ import annotations

from ovms_exporter._redact import redact_params, redact_url


def test_redact_params_hides_credentials() -> None:
    redacted = redact_params({"username": "me", "Password": "pw", "vehicle": "DEMO"})

    assert redacted == {"username": "<redacted>", "Password": "<redacted>", "vehicle": "DEMO"}


def test_redact_url_hides_query_credentials() -> None:
    url = "http://api.openvehicles.com:6868/api/historical/DEMO/D?username=me&password=s%3Dcret"

    redacted = redact_url(url)

    assert "s%3Dcret" not in redacted
    assert redacted.startswith("http://api.openvehicles.com:6868/api/historical/DEMO/D?")
    assert "username=<redacted>" in redacted
    assert "password=<redacted>" in redacted


def test_redact_url_without_query_is_unchanged() -> None:
    assert redact_url("http://example.com/metrics") == "http://example.com/metrics"
