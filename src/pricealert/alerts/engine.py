from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pricealert.alerts.formatting import build_sms_message
from pricealert.alerts.state import AlertState, StateUpdate
from pricealert.utils.time import to_utc_second
from pricealert.utils.types import Candle, InstrumentWatch


@dataclass(frozen=True, slots=True)
class Decision:
    alert: bool = False
    message: Optional[str] = None
    state_update: Optional[StateUpdate] = None
    hit_high: bool = False
    hit_low: bool = False

    @property
    def breached(self) -> bool:
        return self.hit_high or self.hit_low


NO_ALERT = Decision()


def check_breach(watch: InstrumentWatch, candle: Candle) -> tuple[bool, bool]:
    """(hit_high, hit_low). Boundary equality counts as a hit."""
    hit_high = watch.target_high is not None and candle.high >= watch.target_high
    hit_low = watch.target_low is not None and candle.low <= watch.target_low
    return hit_high, hit_low


def evaluate(watch: InstrumentWatch, candle: Optional[Candle], state: AlertState) -> Decision:
    """
    Decide whether `candle` should alert for `watch` given persisted `state`.

    - no candle                           -> no alert
    - no threshold hit                    -> no alert (dedup key left as is)
    - hit, already alerted for this candle -> no alert
    - hit, new candle                     -> alert + StateUpdate(watch.id, candle ts)

    Pure: `state` is only read. The caller applies `state_update`.
    """
    if candle is None:
        return NO_ALERT

    hit_high, hit_low = check_breach(watch, candle)
    if not (hit_high or hit_low):
        return NO_ALERT

    # dedup key is UTC at second precision, same as AlertState.apply stores it
    candle_utc = to_utc_second(candle.datetime_utc)
    if state.last_alerted(watch.id) == candle_utc:
        return Decision(hit_high=hit_high, hit_low=hit_low)

    return Decision(
        alert=True,
        message=build_sms_message(watch, candle, hit_high, hit_low),
        state_update=StateUpdate(watch.id, candle_utc),
        hit_high=hit_high,
        hit_low=hit_low,
    )
