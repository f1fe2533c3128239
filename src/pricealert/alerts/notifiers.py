# src/pricealert/alerts/notifiers.py
from __future__ import annotations
import structlog

log = structlog.get_logger("notifier")

class ConsoleNotifier:
    """Prints alert text to stdout. Used when SMS is disabled or not configured."""

    async def send(self, text: str) -> bool:
        try:
            print(text, flush=True)
        except (OSError, UnicodeEncodeError) as e:
            log.warning("console_print_failed", err=str(e))
            return False
        log.info("console_alert_printed", chars=len(text))
        return True
