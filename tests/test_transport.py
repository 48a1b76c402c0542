from __future__ import annotations

import aiohttp
import pytest
from aiohttp import test_utils, web

from ovms_exporter._transport import HistoricalTransport
from ovms_exporter.config import ExporterConfig
from ovms_exporter.exceptions import OvmsTransportError
from ovms_exporter.schema import MessageType

BODY = b'[{"h_data": "1,2", "h_recordnumber": 1, "h_timestamp": "2023-11-14 22:13:20"}]'


def _backend(seen: list[web.Request]) -> web.Application:
    async def historical(request: web.Request) -> web.Response:
        seen.append(request)
        if request.query.get("password") != "s&cret":
            return web.Response(status=401, text="unauthorised")
        return web.Response(body=BODY, content_type="application/json")

    app = web.Application()
    app.router.add_get("/api/historical/{vehicle}/{code}", historical)
    return app


@pytest.mark.asyncio
async def test_fetch_historical_forwards_credentials() -> None:
    seen: list[web.Request] = []
    async with test_utils.TestServer(_backend(seen)) as server:
        config = ExporterConfig(
            vehicle_id="DEMO",
            username="me",
            password="s&cret",
            server=f"{server.host}:{server.port}",
        )
        async with aiohttp.ClientSession() as session:
            body = await HistoricalTransport(config, session).fetch_historical(MessageType.STATUS)

    assert body == BODY
    (request,) = seen
    assert request.match_info["vehicle"] == "DEMO"
    assert request.match_info["code"] == "S"
    assert request.query["username"] == "me"


@pytest.mark.asyncio
async def test_fetch_historical_raises_on_http_error() -> None:
    seen: list[web.Request] = []
    async with test_utils.TestServer(_backend(seen)) as server:
        config = ExporterConfig(vehicle_id="DEMO", password="wrong", server=f"{server.host}:{server.port}")
        async with aiohttp.ClientSession() as session:
            with pytest.raises(OvmsTransportError) as excinfo:
                await HistoricalTransport(config, session).fetch_historical(MessageType.ENVIRONMENT)

    assert excinfo.value.status_code == 401
    assert "wrong" not in str(excinfo.value)


@pytest.mark.asyncio
async def test_fetch_historical_raises_on_connection_error() -> None:
    config = ExporterConfig(vehicle_id="DEMO", server="127.0.0.1:1", fetch_timeout=5)
    async with aiohttp.ClientSession() as session:
        with pytest.raises(OvmsTransportError):
            await HistoricalTransport(config, session).fetch_historical(MessageType.ENVIRONMENT)
