import pytest

from pricealert.config import config_from_env
from pricealert.errors import SettingsError

ENV_VARS = [
    "TWELVEDATA_API_KEY", "TWELVEDATA_BASE_URL", "HTTP_TIMEOUT_S", "SMS_ENABLED",
    "VOICETRADING_SMS_URL", "VOICETRADING_USERNAME", "VOICETRADING_PASSWORD",
    "VOICETRADING_FROM", "VOICETRADING_TO", "STORE_BACKEND", "REDIS_URL",
    "REDIS_KEY_PREFIX", "STORE_DIR", "CONFIG_CONTAINER", "CONFIG_BLOB", "STATE_BLOB",
    "TICK_MINUTES", "RUN_ONCE", "LOG_LEVEL",
]

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for k in ENV_VARS:
        monkeypatch.delenv(k, raising=False)

def test_defaults(monkeypatch):
    monkeypatch.setenv("TWELVEDATA_API_KEY", "k")
    cfg = config_from_env()
    assert cfg.twelvedata.api_key == "k"
    assert cfg.twelvedata.base_url == "https://api.twelvedata.com"
    assert cfg.sms_enabled is True and not cfg.sms.is_configured()
    assert cfg.sms.base_url == "https://www.voicetrading.com/myaccount/sendsms.php"
    s = cfg.store
    assert (s.backend, s.container, s.config_name, s.state_name) == ("redis", "config", "tradeinstralert.json", "state.json")
    assert cfg.tick_minutes == 5 and cfg.run_once is False

def test_missing_api_key():
    with pytest.raises(SettingsError):
        config_from_env()

def test_overrides(monkeypatch):
    for k, v in {
        "TWELVEDATA_API_KEY": "k", "SMS_ENABLED": "TRUE", "VOICETRADING_USERNAME": "u",
        "VOICETRADING_PASSWORD": "p", "VOICETRADING_FROM": "f", "VOICETRADING_TO": "t",
        "STORE_BACKEND": "file", "STORE_DIR": "/tmp/x", "STATE_BLOB": "s2.json",
        "RUN_ONCE": "1", "HTTP_TIMEOUT_S": "7.5", "TICK_MINUTES": "1",
    }.items():
        monkeypatch.setenv(k, v)
    cfg = config_from_env()
    assert cfg.sms_enabled and cfg.sms.is_configured()
    assert cfg.store.backend == "file" and cfg.store.directory == "/tmp/x" and cfg.store.state_name == "s2.json"
    assert cfg.run_once is True and cfg.tick_minutes == 1
    assert cfg.twelvedata.timeout_s == 7.5 and cfg.sms.timeout_s == 7.5

@pytest.mark.parametrize("val", ["false", "0", "no", ""])
def test_sms_only_enabled_by_true(monkeypatch, val):
    monkeypatch.setenv("TWELVEDATA_API_KEY", "k")
    monkeypatch.setenv("SMS_ENABLED", val)
    assert config_from_env().sms_enabled is False

@pytest.mark.parametrize("k,v", [("STORE_BACKEND", "s3"), ("HTTP_TIMEOUT_S", "-1"), ("TICK_MINUTES", "2.5"), ("HTTP_TIMEOUT_S", "abc")])
def test_invalid_values(monkeypatch, k, v):
    monkeypatch.setenv("TWELVEDATA_API_KEY", "k")
    monkeypatch.setenv(k, v)
    with pytest.raises(SettingsError):
        config_from_env()
