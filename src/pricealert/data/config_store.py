from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import structlog

from pricealert.alerts.state import AlertState
from pricealert.errors import ConfigError
from pricealert.ports import DocumentStore
from pricealert.utils.types import (
    DEFAULT_INTERVAL,
    DEFAULT_OUTPUT_SIZE,
    InstrumentWatch,
    WatchConfig,
)

log = structlog.get_logger("config_store")


class ConfigStore:
    """
    Reads the watch config and reads/writes the alert state, both JSON
    documents living in the same container of a DocumentStore.

    - read_watch_config: missing or malformed -> ConfigError
    - read_state:        missing or unreadable content -> empty AlertState
    - write_state:       store errors propagate to the caller
    """

    def __init__(self, docs: DocumentStore):
        self.docs = docs

    async def read_watch_config(self, container: str, name: str) -> WatchConfig:
        text = await self.docs.read(container, name)
        if text is None:
            raise ConfigError(f"Config document not found: {container}/{name}")
        try:
            doc = json.loads(text, parse_float=Decimal)
        except ValueError as e:
            raise ConfigError(f"Could not parse watch config JSON: {e}") from e
        return watch_config_from_dict(doc)

    async def read_state(self, container: str, name: str) -> AlertState:
        text = await self.docs.read(container, name)
        if text is None:
            return AlertState()
        try:
            return AlertState.from_json(text)
        except ValueError as e:
            log.warning("state_unreadable_starting_fresh", container=container, name=name, err=str(e))
            return AlertState()

    async def write_state(self, container: str, name: str, state: AlertState) -> None:
        await self.docs.write(container, name, state.to_json())


# ---------------- document -> model ---------------- #

def _lower_keys(d: dict) -> dict[str, Any]:
    # property names match case-insensitively ("outputSize", "outputsize", "OutputSize")
    return {str(k).lower(): v for k, v in d.items()}

def _opt_decimal(v: Any, what: str) -> Optional[Decimal]:
    if v is None:
        return None
    if isinstance(v, bool):
        raise ConfigError(f"{what} must be a number, got {v!r}")
    if isinstance(v, (int, Decimal)):
        d = Decimal(v)
    elif isinstance(v, float):
        d = Decimal(str(v))
    elif isinstance(v, str):
        try:
            d = Decimal(v.strip())
        except InvalidOperation as e:
            raise ConfigError(f"{what} must be a number, got {v!r}") from e
    else:
        raise ConfigError(f"{what} must be a number, got {type(v).__name__}")
    if not d.is_finite():
        raise ConfigError(f"{what} must be finite, got {v!r}")
    return d

def _int(v: Any, default: int, what: str) -> int:
    if v is None:
        return default
    if isinstance(v, bool):
        raise ConfigError(f"{what} must be an integer, got {v!r}")
    if isinstance(v, int):
        return v
    if isinstance(v, Decimal) and v == v.to_integral_value():
        return int(v)
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError as e:
            raise ConfigError(f"{what} must be an integer, got {v!r}") from e
    raise ConfigError(f"{what} must be an integer, got {v!r}")

def _str(v: Any) -> str:
    return v if isinstance(v, str) else ""

def instrument_from_dict(d: Any, idx: int = 0) -> InstrumentWatch:
    if not isinstance(d, dict):
        raise ConfigError(f"instruments[{idx}] must be an object")
    m = _lower_keys(d)
    enabled = m.get("enabled", True)
    if enabled is None:
        enabled = True
    if not isinstance(enabled, bool):
        raise ConfigError(f"instruments[{idx}].enabled must be true/false")
    return InstrumentWatch(
        id=_str(m.get("id")),
        symbol=_str(m.get("symbol")),
        target_high=_opt_decimal(m.get("targethigh"), f"instruments[{idx}].targetHigh"),
        target_low=_opt_decimal(m.get("targetlow"), f"instruments[{idx}].targetLow"),
        enabled=enabled,
    )

def watch_config_from_dict(doc: Any) -> WatchConfig:
    """
    Build a WatchConfig, falling back to defaults:
      - blank / non-string interval -> "5min"
      - output size <= 0 or missing -> 1
      - instruments null/missing    -> []
    """
    if not isinstance(doc, dict):
        raise ConfigError("watch config must be a JSON object")
    m = _lower_keys(doc)

    interval = m.get("interval")
    if not isinstance(interval, str) or not interval.strip():
        interval = DEFAULT_INTERVAL

    output_size = _int(m.get("outputsize"), DEFAULT_OUTPUT_SIZE, "outputSize")
    if output_size <= 0:
        output_size = DEFAULT_OUTPUT_SIZE

    raw_instruments = m.get("instruments")
    if raw_instruments is None:
        raw_instruments = []
    if not isinstance(raw_instruments, list):
        raise ConfigError("instruments must be a list")

    return WatchConfig(
        version=_int(m.get("version"), 1, "version"),
        interval=interval,
        output_size=output_size,
        instruments=[instrument_from_dict(d, i) for i, d in enumerate(raw_instruments)],
    )
