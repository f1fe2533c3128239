from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

DEFAULT_INTERVAL = "5min"
DEFAULT_OUTPUT_SIZE = 1

# ---- watch configuration ----

@dataclass(slots=True)
class InstrumentWatch:
    id: str = ""                         # dedup key, e.g. "GOLD"
    symbol: str = ""                     # Twelve Data symbol, e.g. "XAU/USD"
    target_high: Optional[Decimal] = None
    target_low: Optional[Decimal] = None
    enabled: bool = True

    def is_complete(self) -> bool:
        return bool(self.id and self.id.strip() and self.symbol and self.symbol.strip())

@dataclass(slots=True)
class WatchConfig:
    version: int = 1
    interval: str = DEFAULT_INTERVAL
    output_size: int = DEFAULT_OUTPUT_SIZE
    instruments: list[InstrumentWatch] = field(default_factory=list)

    def enabled_instruments(self) -> list[InstrumentWatch]:
        return [w for w in self.instruments if w.enabled]

# ---- market data ----

@dataclass(slots=True)
class Candle:
    """
    Latest OHLC bar for a symbol. datetime_utc is tz-aware UTC, second precision.
    """
    datetime_utc: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
