from __future__ import annotations

from decimal import Decimal

from pricealert.utils.time import fmt_minute_utc
from pricealert.utils.types import Candle, InstrumentWatch

SEPARATOR = " | "

def _num(d: Decimal) -> str:
    # plain notation, never 1E-7
    return format(d, "f")

def build_sms_message(watch: InstrumentWatch, candle: Candle, hit_high: bool, hit_low: bool) -> str:
    # keep it short (SMS-friendly)
    parts = [
        f"ALERT {watch.id} ({watch.symbol})",
        f"{fmt_minute_utc(candle.datetime_utc)} UTC",
        f"O{_num(candle.open)} H{_num(candle.high)} L{_num(candle.low)} C{_num(candle.close)}",
    ]
    if hit_high and watch.target_high is not None:
        parts.append(f"High >= {_num(watch.target_high)}")
    if hit_low and watch.target_low is not None:
        parts.append(f"Low <= {_num(watch.target_low)}")
    return SEPARATOR.join(parts)
