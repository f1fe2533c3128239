from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

import aiohttp
import structlog

log = structlog.get_logger("sms")

DEFAULT_SMS_URL = "https://www.voicetrading.com/myaccount/sendsms.php"

@dataclass(slots=True)
class SmsConfig:
    username: str
    password: str
    sender: str                 # "from" number / id
    recipient: str              # "to" number
    base_url: str = DEFAULT_SMS_URL
    timeout_s: float = 20.0

    def is_configured(self) -> bool:
        return all(s.strip() for s in (self.username, self.password, self.sender, self.recipient))

class VoiceTradingSmsSender:
    """
    Notifier port over VoiceTrading's HTTP GET SMS endpoint:
      {base_url}?username=..&password=..&from=..&to=..&text=..

    Single attempt per message; any failure is logged and reported as False.
    """
    def __init__(self, cfg: SmsConfig, session: Optional[aiohttp.ClientSession] = None):
        self.cfg = cfg
        self._session = session
        self._owns_session = session is None

    async def start(self):
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.cfg.timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True

    async def stop(self):
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def send(self, text: str) -> bool:
        if self._session is None:
            await self.start()
        assert self._session is not None

        params = {
            "username": self.cfg.username,
            "password": self.cfg.password,
            "from": self.cfg.sender,
            "to": self.cfg.recipient,
            "text": text,
        }
        try:
            async with self._session.get(self.cfg.base_url, params=params) as resp:
                body = await _maybe_text(resp)
                if not 200 <= resp.status < 300:
                    log.warning("sms_send_http_error", status=resp.status, body=body[:200])
                    return False
                log.info("sms_sent", body=body[:200])
                return True
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error("sms_send_network_error", err=str(e))
            return False

async def _maybe_text(resp) -> str:
    try:
        return await resp.text()
    except (aiohttp.ClientError, UnicodeDecodeError):
        return "<no body>"
