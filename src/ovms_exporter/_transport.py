"""HTTP transport for the OVMS historical API."""

from __future__ import annotations

import logging
from typing import Protocol

import aiohttp

from ovms_exporter._constants import HISTORICAL_PATH, USER_AGENT
from ovms_exporter._redact import redact_params, redact_url
from ovms_exporter.config import ExporterConfig
from ovms_exporter.exceptions import OvmsTransportError
from ovms_exporter.schema import MessageType

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the refresher.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HistoricalTransport`) concrete.
    """

    async def fetch_historical(self, code: MessageType) -> bytes:
        ...


class HistoricalTransport:
    """Fetch stored protocol messages for one vehicle.

    Credentials are forwarded as the ``username``/``password`` query
    parameters the OVMS server expects and never logged.
    """

    def __init__(self, config: ExporterConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.fetch_timeout)

    def _url(self, code: MessageType) -> str:
        path = HISTORICAL_PATH.format(vehicle_id=self._config.vehicle_id, code=code.value)
        return f"http://{self._config.server}{path}"

    async def fetch_historical(self, code: MessageType) -> bytes:
        url = self._url(code)
        params = {"username": self._config.username, "password": self._config.password}
        headers = {"user-agent": USER_AGENT, "accept": "application/json"}

        _logger.debug("GET %s params=%s", url, redact_params(params))

        try:
            async with self._http.get(url, params=params, headers=headers, timeout=self._timeout) as resp:
                body = await resp.read()
                fetched_url = redact_url(str(resp.url))
                if resp.status != 200:
                    raise OvmsTransportError(
                        f"HTTP {resp.status} from {url}: {body[:200]!r}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except OvmsTransportError:
            raise
        except TimeoutError as exc:
            raise OvmsTransportError(f"Request to {url} timed out", endpoint=url) from exc
        except aiohttp.ClientError as exc:
            raise OvmsTransportError(
                f"Request to {url} failed: {type(exc).__name__}",
                endpoint=url,
            ) from exc

        _logger.debug("Fetched %d byte(s) from %s", len(body), fetched_url)
        return body
