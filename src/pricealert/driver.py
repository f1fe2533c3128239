from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from pricealert.alerts.engine import evaluate
from pricealert.alerts.state import AlertState
from pricealert.config import StoreConfig
from pricealert.data.config_store import ConfigStore
from pricealert.ports import MarketDataPort, NotifierPort
from pricealert.utils.time import utc_now
from pricealert.utils.types import WatchConfig

log = structlog.get_logger("driver")


@dataclass(slots=True)
class TickReport:
    evaluated: int = 0
    alerted: int = 0
    notified: int = 0
    notify_failed: int = 0
    skipped: int = 0
    state_saves: int = 0
    state_save_failures: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TickDriver:
    """
    One pass over the watch list per scheduled tick.

    Per tick:
      1) load watch config (failure aborts the tick, nothing else runs)
      2) load alert state (unreadable -> empty)
      3) for each enabled instrument, in config order:
           fetch candle -> evaluate -> notify (best-effort) -> persist state
    State is written right after each instrument that changes it, so an
    error or cancellation later in the tick cannot lose earlier updates.
    Notification failure does not stop the state update: at most one alert
    per candle, even if that alert never arrived.
    """

    def __init__(
        self,
        *,
        store: ConfigStore,
        market: MarketDataPort,
        notifier: Optional[NotifierPort],
        cfg: Optional[StoreConfig] = None,
    ):
        self.store = store
        self.market = market
        self.notifier = notifier
        self.cfg = cfg or StoreConfig()

    async def run_tick(self) -> TickReport:
        report = TickReport()
        c = self.cfg
        log.info("tick_start", now=utc_now().isoformat(), container=c.container, config=c.config_name)

        try:
            watch_cfg = await self.store.read_watch_config(c.container, c.config_name)
        except Exception as e:
            # config is the only tick-fatal failure
            log.error("watch_config_load_failed", err=str(e), err_type=type(e).__name__)
            report.error = f"{type(e).__name__}: {e}"
            return report

        state = await self._load_state()

        for w in watch_cfg.enabled_instruments():
            await self._process_instrument(w, watch_cfg, state, report)

        log.info(
            "tick_done",
            evaluated=report.evaluated,
            alerted=report.alerted,
            notified=report.notified,
            notify_failed=report.notify_failed,
            skipped=report.skipped,
            state_saves=report.state_saves,
            state_save_failures=report.state_save_failures,
        )
        return report

    # --------------------------- internals ------------------------- #

    async def _load_state(self) -> AlertState:
        c = self.cfg
        try:
            return await self.store.read_state(c.container, c.state_name)
        except Exception as e:
            log.warning("state_load_failed_starting_fresh", err=str(e))
            return AlertState()

    async def _process_instrument(self, w, watch_cfg: WatchConfig, state: AlertState, report: TickReport) -> None:
        if not w.is_complete():
            log.warning("instrument_missing_id_or_symbol", id=w.id, symbol=w.symbol)
            report.skipped += 1
            return

        try:
            candle = await self.market.fetch_latest_candle(w.symbol, watch_cfg.interval, watch_cfg.output_size)
        except Exception as e:
            log.warning("candle_fetch_failed", id=w.id, symbol=w.symbol, err=str(e))
            candle = None
        if candle is None:
            log.warning("no_candle", id=w.id, symbol=w.symbol)
            report.skipped += 1
            return

        decision = evaluate(w, candle, state)
        report.evaluated += 1
        log.info(
            "candle_evaluated",
            id=w.id,
            symbol=w.symbol,
            dt=candle.datetime_utc.isoformat(),
            o=str(candle.open), h=str(candle.high), l=str(candle.low), c=str(candle.close),
            target_high=None if w.target_high is None else str(w.target_high),
            target_low=None if w.target_low is None else str(w.target_low),
            hit=decision.breached,
        )

        if decision.breached and not decision.alert:
            log.info("already_alerted", id=w.id, dt=candle.datetime_utc.isoformat())

        if decision.alert:
            report.alerted += 1
            await self._notify(w.id, decision.message or "", report)

        if decision.state_update is not None:
            state.apply(decision.state_update)
            await self._save_state(state, report)

    async def _notify(self, inst_id: str, text: str, report: TickReport) -> None:
        if self.notifier is None:
            log.warning("no_notifier_configured", id=inst_id)
            return
        try:
            ok = await self.notifier.send(text)
        except Exception as e:
            # best-effort; the caller still applies the state update
            log.warning("notifier_raised", id=inst_id, err=str(e), err_type=type(e).__name__)
            ok = False
        if ok:
            report.notified += 1
        else:
            report.notify_failed += 1
            log.warning("sms_send_failed", id=inst_id)

    async def _save_state(self, state: AlertState, report: TickReport) -> None:
        c = self.cfg
        try:
            await self.store.write_state(c.container, c.state_name, state)
            report.state_saves += 1
        except Exception as e:
            report.state_save_failures += 1
            log.error("state_save_failed", err=str(e), err_type=type(e).__name__)
