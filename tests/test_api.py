"""Tests for the FastAPI API endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from cooldown_registry.api.app import MAX_COOLDOWN_SECONDS, create_app
from cooldown_registry.models.error_codes import ErrorCode
from cooldown_registry.models.settings import SettingsStoreConfig
from cooldown_registry.registry.manager import CooldownRegistry
from cooldown_registry.settings.store import InMemorySettingsStore


NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def registry():
    return CooldownRegistry(InMemorySettingsStore(), clock=lambda: NOW)


@pytest.fixture
def client(registry):
    """Create a test client around a fresh registry."""
    return TestClient(create_app(registry=registry))


class TestCooldownEndpoints:
    def test_set_with_duration(self, client, registry):
        response = client.put("/cooldowns/4004", json={
            "reason": "Account locked",
            "duration_seconds": 900,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "ACCOUNT_LOCKOUT"
        assert data["active"] is True
        assert registry.get_cooldown_info(ErrorCode.ACCOUNT_LOCKOUT).until == \
            NOW + timedelta(seconds=900)

    def test_set_with_until(self, client, registry):
        response = client.put("/cooldowns/4100", json={
            "reason": "Lineup changes exhausted",
            "until": "2025-03-02T00:00:00Z",
        })
        assert response.status_code == 200
        assert registry.get_cooldown_info(ErrorCode.MAX_LINEUP_CHANGES_REACHED).until == \
            datetime(2025, 3, 2, tzinfo=timezone.utc)

    def test_set_requires_exactly_one_expiry(self, client):
        neither = client.put("/cooldowns/4004", json={"reason": "x"})
        both = client.put("/cooldowns/4004", json={
            "reason": "x", "until": "2025-03-02T00:00:00Z", "duration_seconds": 10,
        })
        assert neither.status_code == 422
        assert both.status_code == 422

    def test_duration_is_bounded(self, client, registry):
        response = client.put("/cooldowns/4004", json={
            "reason": "forever",
            "duration_seconds": 1e12,
        })
        assert response.status_code == 422
        assert registry.get_cooldown_info(ErrorCode.ACCOUNT_LOCKOUT) is None

        at_limit = client.put("/cooldowns/4004", json={
            "reason": "long",
            "duration_seconds": MAX_COOLDOWN_SECONDS,
        })
        assert at_limit.status_code == 200

    def test_get_cooldown(self, client):
        client.put("/cooldowns/3000", json={"reason": "offline", "duration_seconds": 60})
        response = client.get("/cooldowns/3000")
        assert response.status_code == 200
        assert response.json()["reason"] == "offline"

    def test_get_missing_cooldown(self, client):
        assert client.get("/cooldowns/3000").status_code == 404

    def test_unknown_code(self, client):
        assert client.get("/cooldowns/123456").status_code == 404
        assert client.put(
            "/cooldowns/123456", json={"reason": "x", "duration_seconds": 1}
        ).status_code == 404

    def test_list_includes_expired(self, client, registry):
        registry.set_cooldown(ErrorCode.ACCOUNT_LOCKOUT, NOW + timedelta(minutes=5), "active")
        registry.set_cooldown(ErrorCode.IMAGE_NOT_FOUND, NOW - timedelta(minutes=5), "expired")

        listed = client.get("/cooldowns").json()
        assert [(c["code"], c["active"]) for c in listed] == [(4004, True), (5000, False)]

        active = client.get("/cooldowns/active").json()
        assert active == [{"code": 4004, "name": "ACCOUNT_LOCKOUT"}]

    def test_clear(self, client, registry):
        registry.set_cooldown(ErrorCode.ACCOUNT_LOCKOUT, NOW + timedelta(minutes=5), "x")

        assert client.delete("/cooldowns/4004").json() == {"code": 4004, "cleared": True}
        assert client.delete("/cooldowns/4004").json() == {"code": 4004, "cleared": False}
        assert registry.get_cooldown_info(ErrorCode.ACCOUNT_LOCKOUT) is None

    def test_reload(self, client, registry):
        registry.set_cooldown(ErrorCode.ACCOUNT_LOCKOUT, NOW + timedelta(minutes=5), "x")
        response = client.post("/cooldowns/reload")
        assert response.status_code == 200
        assert response.json() == {"loaded": 1}


class TestAppFactory:
    def test_builds_json_store_from_config(self, tmp_path):
        app = create_app(store_config=SettingsStoreConfig(path=tmp_path / "settings.json"))
        client = TestClient(app)

        client.put("/cooldowns/4004", json={"reason": "x", "duration_seconds": 60})

        assert (tmp_path / "settings.json").exists()
        assert app.state.registry.is_in_cooldown(ErrorCode.ACCOUNT_LOCKOUT) is True
