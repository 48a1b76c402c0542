from __future__ import annotations

import pytest
from aiohttp import test_utils

from ovms_exporter.cache import SnapshotCache
from ovms_exporter.server import create_app
from ovms_exporter.snapshot import Snapshot


@pytest.mark.asyncio
async def test_metrics_serves_empty_body_before_first_refresh() -> None:
    async with test_utils.TestClient(test_utils.TestServer(create_app(SnapshotCache()))) as client:
        resp = await client.get("/metrics")
        assert resp.status == 200
        assert resp.content_type == "text/plain"
        assert "version=0.0.4" in resp.headers["Content-Type"]
        assert await resp.text() == ""


@pytest.mark.asyncio
async def test_metrics_serves_published_snapshot() -> None:
    cache = SnapshotCache()
    text = "# TYPE v_b_12v_voltage gauge\nv_b_12v_voltage 12.6 1700000000000\n"
    cache.publish(Snapshot(text=text, sample_count=1, metric_count=1))

    async with test_utils.TestClient(test_utils.TestServer(create_app(cache))) as client:
        resp = await client.get("/metrics")
        assert resp.status == 200
        assert await resp.text() == text
        assert "X-Snapshot-Created" in resp.headers


@pytest.mark.asyncio
async def test_healthz_and_unknown_paths() -> None:
    async with test_utils.TestClient(test_utils.TestServer(create_app(SnapshotCache()))) as client:
        resp = await client.get("/healthz")
        assert await resp.text() == "ok"

        resp = await client.get("/nope")
        assert resp.status == 404
