from __future__ import annotations

import time
from datetime import datetime, timezone

# --- UTC helpers (candle timestamps are the dedup key, keep them exact) ---

def utc_now_s() -> float:
    """Unix epoch seconds (float)."""
    return time.time()

def utc_now() -> datetime:
    """Current UTC time truncated to the second."""
    return datetime.now(tz=timezone.utc).replace(microsecond=0)

def to_utc_second(dt: datetime) -> datetime:
    """
    Normalize to tz-aware UTC with second precision.
    Naive datetimes are taken as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.replace(microsecond=0)

def parse_utc(text: str) -> datetime:
    """
    Parse an ISO-like datetime string ("2024-01-01 00:05:00", "...T...Z", "2024-01-01").
    Raises ValueError on anything else.
    """
    s = text.strip()
    if not s:
        raise ValueError("empty datetime string")
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    return to_utc_second(datetime.fromisoformat(s))

def iso_z(dt: datetime) -> str:
    """UTC datetime -> '2024-01-01T00:05:00Z'."""
    return to_utc_second(dt).strftime("%Y-%m-%dT%H:%M:%SZ")

def fmt_minute_utc(dt: datetime) -> str:
    """UTC datetime -> '2024-01-01 00:05' (SMS friendly)."""
    return to_utc_second(dt).strftime("%Y-%m-%d %H:%M")

# --- schedule helpers ---

def seconds_until_next_boundary(period_s: int, now_s: float | None = None) -> float:
    """
    Seconds until the next wall-clock multiple of period_s (e.g. :00, :05, :10 for 300).
    Exactly on a boundary -> a full period.
    """
    if period_s <= 0:
        raise ValueError("period_s must be >= 1")
    now = utc_now_s() if now_s is None else now_s
    remainder = now % period_s
    return period_s - remainder
