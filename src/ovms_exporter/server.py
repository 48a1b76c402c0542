"""aiohttp application serving the cached exposition text."""

from __future__ import annotations

import logging

from aiohttp import web

from ovms_exporter._constants import METRICS_CONTENT_TYPE
from ovms_exporter.cache import SnapshotCache

_logger = logging.getLogger(__name__)

CACHE_KEY: web.AppKey[SnapshotCache] = web.AppKey("cache", SnapshotCache)


async def handle_healthz(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def handle_metrics(request: web.Request) -> web.Response:
    # Never blocks on a refresh; serves the last published snapshot or "".
    snapshot = request.app[CACHE_KEY].current()
    headers = {"Content-Type": METRICS_CONTENT_TYPE}
    if not snapshot.is_empty:
        headers["X-Snapshot-Created"] = snapshot.created_at.isoformat()
    return web.Response(text=snapshot.text, headers=headers)


def create_app(cache: SnapshotCache) -> web.Application:
    app = web.Application()
    app[CACHE_KEY] = cache
    app.router.add_get("/healthz", handle_healthz)
    app.router.add_get("/metrics", handle_metrics)
    return app


async def start_server(app: web.Application, host: str, port: int) -> web.AppRunner:
    """Start *app* on ``host:port`` and return the runner for cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    _logger.info("Metrics exporter listening on %s:%d", host, port)
    return runner
