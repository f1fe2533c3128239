"""
Ports (integration boundaries) the tick driver talks to.
"""

from __future__ import annotations

from typing import Optional, Protocol

from pricealert.utils.types import Candle


class MarketDataPort(Protocol):
    """Latest candle for a symbol, or None when unavailable."""

    async def fetch_latest_candle(
        self, symbol: str, interval: str, output_size: int
    ) -> Optional[Candle]:
        ...


class NotifierPort(Protocol):
    """Delivers alert text. Returns False on failure, never raises."""

    async def send(self, text: str) -> bool:
        ...


class DocumentStore(Protocol):
    """Opaque text documents addressed by (container, name)."""

    async def read(self, container: str, name: str) -> Optional[str]:
        """Document text, or None if it does not exist."""

    async def write(self, container: str, name: str, text: str) -> None:
        ...
