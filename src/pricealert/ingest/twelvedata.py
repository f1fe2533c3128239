from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Optional

import aiohttp
import structlog

from pricealert.ingest import parser
from pricealert.utils.types import Candle

DEFAULT_BASE_URL = "https://api.twelvedata.com"


@dataclass(slots=True)
class TwelveDataConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = 20.0


class TwelveDataClient:
    """
    Market data port backed by Twelve Data's /time_series endpoint.

    Every failure mode (network, timeout, HTTP status, JSON, payload shape)
    collapses to None so the caller can skip the instrument and move on.

    Usage:
        client = TwelveDataClient(TwelveDataConfig(api_key=...))
        await client.start()
        candle = await client.fetch_latest_candle("XAU/USD", "5min", 1)
        await client.stop()
    """

    def __init__(self, cfg: TwelveDataConfig, session: Optional[aiohttp.ClientSession] = None):
        self.cfg = cfg
        self._session = session
        self._owns_session = session is None
        self._log = structlog.get_logger("twelvedata")

    async def start(self) -> None:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.cfg.timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def stop(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def fetch_latest_candle(self, symbol: str, interval: str, output_size: int) -> Optional[Candle]:
        if self._session is None:
            await self.start()
        assert self._session is not None

        url = f"{self.cfg.base_url.rstrip('/')}/time_series"
        # Docs: https://twelvedata.com/docs#time-series
        params = {
            "symbol": symbol,
            "interval": interval,
            "outputsize": str(output_size),
            "apikey": self.cfg.api_key,
        }
        try:
            async with self._session.get(url, params=params) as resp:
                body = await resp.text()
                if not 200 <= resp.status < 300:
                    self._log.warning("twelvedata_http_error", symbol=symbol, status=resp.status, body=body[:200])
                    return None
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            self._log.warning("twelvedata_network_error", symbol=symbol, err=str(e))
            return None

        try:
            payload = json.loads(body)
        except ValueError as e:
            self._log.warning("twelvedata_json_error", symbol=symbol, err=str(e), snippet=body[:200])
            return None

        candle = parser.parse_time_series(payload)
        if candle is None:
            self._log.info("twelvedata_no_values", symbol=symbol)
        return candle
