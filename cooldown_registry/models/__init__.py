"""Cooldown registry data models."""

from cooldown_registry.models.cooldown import CooldownEntry, ensure_utc, utc_now
from cooldown_registry.models.error_codes import ErrorCode
from cooldown_registry.models.settings import (
    ErrorCooldownSetting,
    SettingsSnapshot,
    SettingsStoreConfig,
)

__all__ = [
    "CooldownEntry",
    "ErrorCode",
    "ErrorCooldownSetting",
    "SettingsSnapshot",
    "SettingsStoreConfig",
    "ensure_utc",
    "utc_now",
]
