from datetime import datetime, timedelta, timezone
from decimal import Decimal

from structlog.testing import capture_logs

from pricealert.ingest import parser
from pricealert.utils.types import Candle

def _payload(**v0):
    row = {"datetime": "2024-01-01 00:05:00", "open": "1995.1", "high": "2005.0", "low": "1990.2", "close": "2001.7"}
    row.update(v0)
    return {"meta": {"symbol": "XAU/USD"}, "values": [row, {"datetime": "2024-01-01 00:00:00", "open": "1", "high": "1", "low": "1", "close": "1"}], "status": "ok"}

def test_parse_latest_value():
    c = parser.parse_time_series(_payload())
    assert isinstance(c, Candle)
    assert c.datetime_utc == datetime(2024, 1, 1, 0, 5, tzinfo=timezone.utc)
    assert c.high == Decimal("2005.0") and c.low == Decimal("1990.2")
    assert c.open == Decimal("1995.1") and c.close == Decimal("2001.7")

def test_status_error_or_empty_returns_none():
    for body in [
        {"code": 400, "message": "bad symbol", "status": "error"},
        {"values": [], "status": "ok"},
        {"status": "ok"},
        {"values": "nope"},
        ["not", "a", "dict"],
        None,
    ]:
        assert parser.parse_time_series(body) is None

def test_unparseable_prices_become_zero():
    c = parser.parse_time_series(_payload(open="n/a", high=None, low="NaN"))
    assert c.open == Decimal(0) and c.high == Decimal(0) and c.low == Decimal(0)
    assert c.close == Decimal("2001.7")

def test_unparseable_datetime_substitutes_now_and_warns():
    before = datetime.now(timezone.utc).replace(microsecond=0)
    with capture_logs() as logs:
        c = parser.parse_time_series(_payload(datetime="yesterday-ish"))
    after = datetime.now(timezone.utc)
    assert before <= c.datetime_utc <= after + timedelta(seconds=1)
    assert c.datetime_utc.microsecond == 0
    assert any(e["event"] == "candle_datetime_unparsed" for e in logs)
