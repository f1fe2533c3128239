from __future__ import annotations

import os
from dataclasses import dataclass, field

from pricealert.errors import SettingsError
from pricealert.ingest.twelvedata import DEFAULT_BASE_URL, TwelveDataConfig
from pricealert.notify.sms import DEFAULT_SMS_URL, SmsConfig

# Store backends
BACKEND_REDIS = "redis"
BACKEND_FILE = "file"


@dataclass(slots=True)
class StoreConfig:
    backend: str = BACKEND_REDIS
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "pricealert"
    directory: str = "./data"
    container: str = "config"
    config_name: str = "tradeinstralert.json"
    state_name: str = "state.json"


@dataclass(slots=True)
class ServiceConfig:
    """
    Everything the service reads from the environment, resolved once at startup.
    """
    twelvedata: TwelveDataConfig
    sms: SmsConfig
    sms_enabled: bool = True
    store: StoreConfig = field(default_factory=StoreConfig)
    tick_minutes: int = 5
    run_once: bool = False
    log_level: str = "INFO"


def _get(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v

def _require(name: str) -> str:
    v = os.getenv(name)
    if v is None or not v.strip():
        raise SettingsError(f"Missing environment variable: {name}")
    return v

def _flag(name: str, default: str) -> bool:
    return _get(name, default).strip().lower() in ("1", "true", "yes")

def _positive_float(name: str, default: str) -> float:
    raw = _get(name, default)
    try:
        v = float(raw)
    except ValueError as e:
        raise SettingsError(f"{name} must be a number, got {raw!r}") from e
    if v <= 0:
        raise SettingsError(f"{name} must be > 0, got {raw!r}")
    return v


def config_from_env() -> ServiceConfig:
    """
    Build ServiceConfig from os.environ (load_dotenv() should have run first).
    Raises SettingsError when TWELVEDATA_API_KEY is missing or a number is invalid.
    """
    timeout_s = _positive_float("HTTP_TIMEOUT_S", "20")

    backend = _get("STORE_BACKEND", BACKEND_REDIS).strip().lower()
    if backend not in (BACKEND_REDIS, BACKEND_FILE):
        raise SettingsError(f"STORE_BACKEND must be 'redis' or 'file', got {backend!r}")

    tick_minutes = _positive_float("TICK_MINUTES", "5")
    if tick_minutes != int(tick_minutes):
        raise SettingsError("TICK_MINUTES must be a whole number of minutes")

    return ServiceConfig(
        twelvedata=TwelveDataConfig(
            api_key=_require("TWELVEDATA_API_KEY"),
            base_url=_get("TWELVEDATA_BASE_URL", DEFAULT_BASE_URL),
            timeout_s=timeout_s,
        ),
        # SMS is on unless SMS_ENABLED is something other than "true"
        sms_enabled=_get("SMS_ENABLED", "true").strip().lower() == "true",
        sms=SmsConfig(
            username=_get("VOICETRADING_USERNAME", ""),
            password=_get("VOICETRADING_PASSWORD", ""),
            sender=_get("VOICETRADING_FROM", ""),
            recipient=_get("VOICETRADING_TO", ""),
            base_url=_get("VOICETRADING_SMS_URL", DEFAULT_SMS_URL),
            timeout_s=timeout_s,
        ),
        store=StoreConfig(
            backend=backend,
            redis_url=_get("REDIS_URL", "redis://localhost:6379/0"),
            redis_key_prefix=_get("REDIS_KEY_PREFIX", "pricealert"),
            directory=_get("STORE_DIR", "./data"),
            container=_get("CONFIG_CONTAINER", "config"),
            config_name=_get("CONFIG_BLOB", "tradeinstralert.json"),
            state_name=_get("STATE_BLOB", "state.json"),
        ),
        tick_minutes=int(tick_minutes),
        run_once=_flag("RUN_ONCE", "0"),
        log_level=_get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
