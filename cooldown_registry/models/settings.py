"""Persisted settings document and its error cooldown records."""

import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cooldown_registry.models.cooldown import ensure_utc


class ErrorCooldownSetting(BaseModel):
    """
    One persisted cooldown record.

    The code is kept as a raw integer: the document may carry codes this
    build does not know about, and those must survive a load/save cycle.
    """

    model_config = ConfigDict(populate_by_name=True)

    error_code: int = Field(alias="code")
    cooldown_until: datetime = Field(alias="until")
    reason: str = ""

    @field_validator("cooldown_until")
    @classmethod
    def _until_is_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class SettingsSnapshot(BaseModel):
    """The full settings document, read and rewritten as a unit."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    error_cooldowns: List[ErrorCooldownSetting] = []

    def find_cooldown(self, code: int) -> Optional[ErrorCooldownSetting]:
        """First record for `code`, if any."""
        for record in self.error_cooldowns:
            if record.error_code == int(code):
                return record
        return None

    def to_document(self) -> dict:
        """JSON-ready form using the short record field names."""
        return self.model_dump(mode="json", by_alias=True)


class SettingsStoreConfig(BaseModel):
    """Configuration for the JSON file settings store."""

    path: Path = Path("settings.json")
    indent: int = 2

    @classmethod
    def from_env(cls) -> "SettingsStoreConfig":
        """Build a config from COOLDOWN_SETTINGS_PATH, if set."""
        path = os.environ.get("COOLDOWN_SETTINGS_PATH")
        if path:
            return cls(path=Path(path).expanduser())
        return cls()
