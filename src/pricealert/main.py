# src/pricealert/main.py
import asyncio
import logging

import structlog
from dotenv import load_dotenv

from pricealert.alerts.notifiers import ConsoleNotifier
from pricealert.config import BACKEND_FILE, ServiceConfig, config_from_env
from pricealert.data.config_store import ConfigStore
from pricealert.driver import TickDriver
from pricealert.ingest.twelvedata import TwelveDataClient
from pricealert.notify.sms import VoiceTradingSmsSender
from pricealert.utils.time import seconds_until_next_boundary

from storage.documents import FileDocumentStore, RedisDocumentStore

load_dotenv()
log = structlog.get_logger()


# ---------------------------
# Wiring
# ---------------------------

def configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


def build_document_store(cfg: ServiceConfig):
    s = cfg.store
    if s.backend == BACKEND_FILE:
        log.info("store_file", directory=s.directory)
        return FileDocumentStore(s.directory)
    log.info("store_redis", url=s.redis_url, prefix=s.redis_key_prefix)
    return RedisDocumentStore.from_url(s.redis_url, prefix=s.redis_key_prefix)


def build_notifier(cfg: ServiceConfig):
    """
    SMS when enabled and fully configured; otherwise alerts go to the console.
    """
    if not cfg.sms_enabled:
        log.info("sms_disabled")
        return ConsoleNotifier()
    if not cfg.sms.is_configured():
        log.warning("sms_enabled_missing_voicetrading_env")
        return ConsoleNotifier()
    log.info("sms_enabled")
    return VoiceTradingSmsSender(cfg.sms)


# ---------------------------
# Schedule
# ---------------------------

async def run_schedule(driver: TickDriver, period_s: int) -> None:
    """
    Fire a tick at every wall-clock multiple of period_s (second 0).
    Ticks run back to back in this task, so they never overlap; a boundary
    passed while a tick was still running is skipped.
    """
    while True:
        wait_s = seconds_until_next_boundary(period_s)
        await asyncio.sleep(wait_s)
        started = asyncio.get_running_loop().time()
        try:
            await driver.run_tick()
        except Exception as e:
            # one bad tick never stops the schedule
            log.error("tick_failed", err=str(e), err_type=type(e).__name__)
        elapsed = asyncio.get_running_loop().time() - started
        if elapsed >= period_s:
            log.warning("tick_overran", elapsed_s=round(elapsed, 3), period_s=period_s)


# ---------------------------
# Main
# ---------------------------

async def main():
    cfg = config_from_env()
    configure_logging(cfg.log_level)

    docs = build_document_store(cfg)
    market = TwelveDataClient(cfg.twelvedata)
    notifier = build_notifier(cfg)

    driver = TickDriver(
        store=ConfigStore(docs),
        market=market,
        notifier=notifier,
        cfg=cfg.store,
    )

    await market.start()
    if isinstance(notifier, VoiceTradingSmsSender):
        await notifier.start()

    try:
        if cfg.run_once:
            report = await driver.run_tick()
            return 0 if report.ok else 1
        log.info("schedule_start", every_minutes=cfg.tick_minutes)
        await run_schedule(driver, cfg.tick_minutes * 60)
    finally:
        # graceful shutdown to avoid unclosed sessions
        await market.stop()
        if isinstance(notifier, VoiceTradingSmsSender):
            await notifier.stop()
        await docs.close()


def run() -> None:
    try:
        raise SystemExit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
