"""
Cooldown Registry API — FastAPI endpoints.

Exposes the registry for operators:
- Cooldown inspection
- Manual set / clear
- Reloading from the settings document
"""

from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, model_validator

from cooldown_registry.models.cooldown import CooldownEntry
from cooldown_registry.models.error_codes import ErrorCode
from cooldown_registry.models.settings import SettingsStoreConfig
from cooldown_registry.registry.manager import CooldownRegistry
from cooldown_registry.settings.store import JsonFileSettingsStore, SettingsStore


# --- Request/Response Models ---

# Ten years; keeps now + duration inside the datetime range.
MAX_COOLDOWN_SECONDS = 10 * 365 * 24 * 3600


class CooldownSetRequest(BaseModel):
    reason: str
    until: Optional[datetime] = None
    duration_seconds: Optional[float] = Field(default=None, gt=0, le=MAX_COOLDOWN_SECONDS)

    @model_validator(mode="after")
    def _one_expiry(self) -> "CooldownSetRequest":
        if (self.until is None) == (self.duration_seconds is None):
            raise ValueError("Provide exactly one of 'until' or 'duration_seconds'")
        return self


class CooldownView(BaseModel):
    code: int
    name: str
    until: datetime
    reason: str
    active: bool


def _view(entry: CooldownEntry, now: datetime) -> CooldownView:
    return CooldownView(
        code=int(entry.code),
        name=entry.code.name,
        until=entry.until,
        reason=entry.reason,
        active=entry.is_active(now),
    )


def _parse_code(code: int) -> ErrorCode:
    try:
        return ErrorCode(code)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown error code {code}") from None


# --- Application Factory ---

def create_app(
    registry: Optional[CooldownRegistry] = None,
    settings_store: Optional[SettingsStore] = None,
    store_config: Optional[SettingsStoreConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Cooldown Registry API",
        description="Upstream API error cooldowns",
        version="0.1.0",
    )

    if registry is None:
        store = settings_store or JsonFileSettingsStore(
            store_config or SettingsStoreConfig.from_env()
        )
        registry = CooldownRegistry(store)
    reg = registry
    store = reg.settings_store

    app.state.settings_store = store
    app.state.registry = reg

    # === COOLDOWNS ===

    @app.get("/cooldowns", response_model=List[CooldownView])
    def list_cooldowns():
        """Every recorded cooldown, expired ones included."""
        now = reg.now()
        entries = sorted(reg.get_all_cooldowns().values(), key=lambda e: int(e.code))
        return [_view(e, now) for e in entries]

    @app.get("/cooldowns/active", response_model=List[dict])
    def list_active_cooldowns():
        """Codes currently in cooldown."""
        codes = sorted(reg.get_active_cooldowns())
        return [{"code": int(c), "name": c.name} for c in codes]

    @app.get("/cooldowns/{code}", response_model=CooldownView)
    def get_cooldown(code: int):
        error_code = _parse_code(code)
        entry = reg.get_cooldown_info(error_code)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"No cooldown for {error_code.name}")
        return _view(entry, reg.now())

    @app.put("/cooldowns/{code}", response_model=CooldownView)
    def set_cooldown(code: int, req: CooldownSetRequest):
        error_code = _parse_code(code)
        if req.until is not None:
            entry = reg.set_cooldown(error_code, req.until, req.reason)
        else:
            entry = reg.set_cooldown(
                error_code, timedelta(seconds=req.duration_seconds), req.reason
            )
        return _view(entry, reg.now())

    @app.delete("/cooldowns/{code}")
    def clear_cooldown(code: int):
        error_code = _parse_code(code)
        return {"code": int(error_code), "cleared": reg.clear_cooldown(error_code)}

    @app.post("/cooldowns/reload")
    def reload_cooldowns():
        """Pick up edits made to the settings document outside this process."""
        if isinstance(store, JsonFileSettingsStore):
            store.check_for_changes()
        return {"loaded": reg.load_from_settings()}

    return app
