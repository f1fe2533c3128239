import asyncio
import json

import aiohttp
import pytest

from pricealert.ingest.twelvedata import TwelveDataClient, TwelveDataConfig
from tests.helpers.fakes import FakeSession, utc

OK_BODY = json.dumps({
    "meta": {"symbol": "XAU/USD", "interval": "5min"},
    "values": [{"datetime": "2024-01-01 00:05:00", "open": "1995", "high": "2005", "low": "1990", "close": "2001"}],
    "status": "ok",
})

def _client(session):
    return TwelveDataClient(TwelveDataConfig(api_key="KEY", base_url="https://td.test/"), session=session)

@pytest.mark.asyncio
async def test_fetch_builds_request_and_parses():
    s = FakeSession(status=200, body=OK_BODY)
    c = await _client(s).fetch_latest_candle("XAU/USD", "5min", 3)
    assert c is not None and c.datetime_utc == utc(2024, 1, 1, 0, 5)
    url, params = s.requests[0]
    assert url == "https://td.test/time_series"
    assert params == {"symbol": "XAU/USD", "interval": "5min", "outputsize": "3", "apikey": "KEY"}

@pytest.mark.asyncio
@pytest.mark.parametrize("status,body", [
    (500, "oops"),
    (429, '{"status":"error"}'),
    (200, "<html>not json</html>"),
    (200, '{"status":"error","code":401,"message":"bad key"}'),
    (200, '{"values":[],"status":"ok"}'),
])
async def test_fetch_failures_return_none(status, body):
    assert await _client(FakeSession(status=status, body=body)).fetch_latest_candle("X", "5min", 1) is None

@pytest.mark.asyncio
@pytest.mark.parametrize("exc", [aiohttp.ClientConnectionError("down"), asyncio.TimeoutError()])
async def test_transport_errors_return_none(exc):
    assert await _client(FakeSession(exc=exc)).fetch_latest_candle("X", "5min", 1) is None

@pytest.mark.asyncio
async def test_injected_session_is_not_closed():
    s = FakeSession(body=OK_BODY)
    client = _client(s)
    await client.start()
    await client.stop()
    assert s.closed is False

@pytest.mark.asyncio
async def test_undecodable_body_returns_none():
    err = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
    s = FakeSession(status=200, text_exc=err)
    assert await _client(s).fetch_latest_candle("X", "5min", 1) is None
