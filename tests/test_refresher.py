from __future__ import annotations

import asyncio
import json

import pytest

from ovms_exporter.cache import SnapshotCache
from ovms_exporter.exceptions import OvmsTransportError
from ovms_exporter.refresher import Refresher
from ovms_exporter.schema import MULTI_SCHEMA_REGISTRY, SINGLE_SCHEMA_REGISTRY, MessageType, SchemaRegistry
from ovms_exporter.snapshot import SnapshotBuilder


def _env_body(voltage: str, timestamp: str = "2023-11-14 22:13:20") -> bytes:
    fields = ["0"] * 21
    fields[14] = voltage
    return json.dumps([{"h_data": ",".join(fields), "h_recordnumber": 1, "h_timestamp": timestamp}]).encode()


class _FakeTransport:
    def __init__(self, responses: dict[MessageType, list[bytes | Exception]]) -> None:
        self._responses = responses
        self.calls: list[MessageType] = []

    async def fetch_historical(self, code: MessageType) -> bytes:
        self.calls.append(code)
        queue = self._responses[code]
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result


def _refresher(
    transport: _FakeTransport,
    cache: SnapshotCache,
    registry: SchemaRegistry = SINGLE_SCHEMA_REGISTRY,
    name_filter: str | None = "^v_b_12v_voltage$",
) -> Refresher:
    return Refresher(transport, SnapshotBuilder(registry, name_filter=name_filter), cache, registry.codes)


@pytest.mark.asyncio
async def test_successful_cycle_publishes_snapshot() -> None:
    cache = SnapshotCache()
    transport = _FakeTransport({MessageType.ENVIRONMENT: [_env_body("12.6")]})

    assert await _refresher(transport, cache).refresh_once() is True

    assert cache.text() == "# TYPE v_b_12v_voltage gauge\nv_b_12v_voltage 12.6 1700000000000\n"
    assert transport.calls == [MessageType.ENVIRONMENT]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [
        OvmsTransportError("boom", status_code=500),
        b"<html>not json</html>",
        b'{"error": "unauthorised"}',
        b'[{"h_data": 12}]',
        b"[]",
    ],
)
async def test_failed_cycle_keeps_previous_snapshot(failure: bytes | Exception) -> None:
    cache = SnapshotCache()
    transport = _FakeTransport({MessageType.ENVIRONMENT: [_env_body("12.6"), failure]})
    refresher = _refresher(transport, cache)

    assert await refresher.refresh_once() is True
    before = cache.text()

    assert await refresher.refresh_once() is False
    assert cache.text() == before


@pytest.mark.asyncio
async def test_failure_before_first_success_leaves_cache_empty() -> None:
    cache = SnapshotCache()
    transport = _FakeTransport({MessageType.ENVIRONMENT: [OvmsTransportError("down")]})

    assert await _refresher(transport, cache).refresh_once() is False
    assert cache.text() == ""
    assert not cache.is_ready


@pytest.mark.asyncio
async def test_multi_schema_fetches_every_code_and_tags_records() -> None:
    def body(data: str) -> bytes:
        return json.dumps([{"h_data": data, "h_recordnumber": 7, "h_timestamp": "2023-11-14 22:13:20"}]).encode()

    cache = SnapshotCache()
    transport = _FakeTransport(
        {
            MessageType.STATUS: [body("42.5,K,230,16,stopped")],
            MessageType.ENVIRONMENT: [body("")],
            MessageType.LOCATION: [body("51.5,-0.12")],
            MessageType.TYRES: [b"[]"],
        }
    )

    refresher = _refresher(transport, cache, MULTI_SCHEMA_REGISTRY, name_filter=None)
    assert await refresher.refresh_once() is True

    assert transport.calls == list(MULTI_SCHEMA_REGISTRY.codes)
    text = cache.text()
    assert "ovms_S_ms_v_bat_soc 42.5 1700000000000" in text
    assert 'ovms_S_ms_v_charge_state{value="stopped"} 1 1700000000000' in text
    assert "ovms_L_ms_v_pos_longitude -0.12 1700000000000" in text


@pytest.mark.asyncio
async def test_run_repeats_until_cancelled() -> None:
    cache = SnapshotCache()
    transport = _FakeTransport({MessageType.ENVIRONMENT: [_env_body("12.6"), _env_body("12.5"), _env_body("12.4")]})
    refresher = _refresher(transport, cache)

    task = asyncio.create_task(refresher.run(0.01))
    while len(transport.calls) < 2:
        await asyncio.sleep(0.005)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(transport.calls) >= 2
    assert "v_b_12v_voltage 12.6" not in cache.text()
