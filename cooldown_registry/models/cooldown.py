"""Cooldown Entry — one active or expired cooldown window for an error code."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from cooldown_registry.models.error_codes import ErrorCode


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CooldownEntry(BaseModel):
    """
    A cooldown window recorded for an upstream error code.

    `until` is absolute. An entry whose `until` has passed is expired but
    stays in the registry until it is cleared.
    """

    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    until: datetime
    reason: str

    @field_validator("until")
    @classmethod
    def _until_is_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """True while `until` is strictly after `now`."""
        if now is None:
            now = utc_now()
        return self.until > ensure_utc(now)
