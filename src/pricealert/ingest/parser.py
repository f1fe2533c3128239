from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog

from pricealert.utils.time import parse_utc, utc_now
from pricealert.utils.types import Candle

log = structlog.get_logger("parser")

def _dec(v: Any) -> Decimal:
    """Twelve Data sends prices as strings; anything unparseable becomes 0."""
    if v is None or isinstance(v, bool):
        return Decimal(0)
    try:
        d = Decimal(str(v).strip())
    except (InvalidOperation, ValueError):
        return Decimal(0)
    return d if d.is_finite() else Decimal(0)

def parse_time_series(body: Any) -> Optional[Candle]:
    """
    Return the latest Candle from a Twelve Data /time_series payload; else None.

    Example payload:
      {
        "meta": {"symbol": "XAU/USD", "interval": "5min", ...},
        "values": [
          {"datetime": "2024-01-01 00:05:00", "open": "1995.1", "high": "2005.0",
           "low": "1990.2", "close": "2001.7"},
          ...
        ],
        "status": "ok"
      }
    Error payloads look like {"code": 400, "message": "...", "status": "error"}.
    """
    if not isinstance(body, dict):
        return None

    status = body.get("status")
    if isinstance(status, str) and status != "ok":
        log.warning("twelvedata_status_not_ok", status=status, message=body.get("message"))
        return None

    values = body.get("values")
    if not isinstance(values, list) or not values:
        return None
    v0 = values[0]
    if not isinstance(v0, dict):
        return None

    # Twelve Data reports exchange-local time unless a timezone is requested;
    # naive values are treated as UTC for dedup purposes.
    raw_dt = v0.get("datetime")
    try:
        dt = parse_utc(raw_dt) if isinstance(raw_dt, str) else None
    except ValueError:
        dt = None
    if dt is None:
        dt = utc_now()
        log.warning("candle_datetime_unparsed", raw=str(raw_dt)[:64], substituted=dt.isoformat())

    return Candle(
        datetime_utc=dt,
        open=_dec(v0.get("open")),
        high=_dec(v0.get("high")),
        low=_dec(v0.get("low")),
        close=_dec(v0.get("close")),
    )
