from __future__ import annotations


class PriceAlertError(Exception):
    """Base class for errors raised by the alert service."""


class ConfigError(PriceAlertError):
    """Watch config document is missing or malformed. Aborts the current tick."""


class SettingsError(PriceAlertError):
    """Required environment setting is missing. Raised once, at startup."""
