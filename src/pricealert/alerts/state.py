from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pricealert.utils.time import iso_z, parse_utc, to_utc_second

STATE_KEY = "lastAlertedCandleUtc"

@dataclass(frozen=True, slots=True)
class StateUpdate:
    """Mark `instrument_id` as alerted for the candle at `candle_utc`."""
    instrument_id: str
    candle_utc: datetime

# instrument id -> last alerted candle datetime (UTC)
@dataclass(slots=True)
class AlertState:
    last_alerted_candle_utc: dict[str, datetime] = field(default_factory=dict)

    def last_alerted(self, instrument_id: str) -> Optional[datetime]:
        return self.last_alerted_candle_utc.get(instrument_id)

    def apply(self, update: StateUpdate) -> None:
        self.last_alerted_candle_utc[update.instrument_id] = to_utc_second(update.candle_utc)

    # ---- JSON document ----

    def to_json(self) -> str:
        doc = {STATE_KEY: {k: iso_z(v) for k, v in self.last_alerted_candle_utc.items()}}
        return json.dumps(doc)

    @classmethod
    def from_json(cls, text: str) -> "AlertState":
        """
        Parse a state document. Raises ValueError (json.JSONDecodeError included)
        on anything that is not {"lastAlertedCandleUtc": {id: iso-datetime}}.
        A missing or null map is an empty state.
        """
        doc = json.loads(text)
        if doc is None:
            return cls()
        if not isinstance(doc, dict):
            raise ValueError("state document must be a JSON object")
        # property names match case-insensitively
        raw = None
        for k, v in doc.items():
            if isinstance(k, str) and k.lower() == STATE_KEY.lower():
                raw = v
                break
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValueError(f"{STATE_KEY} must be a JSON object")
        out: dict[str, datetime] = {}
        for inst_id, ts in raw.items():
            if not isinstance(ts, str):
                raise ValueError(f"timestamp for {inst_id!r} must be a string")
            out[str(inst_id)] = parse_utc(ts)
        return cls(last_alerted_candle_utc=out)
