"""
Tests for the registry sync REST API.

Dependencies are overridden with the in-memory database and a mocked
registry client.
"""
import pytest
from datetime import timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient

from src.vehicle_registry.api import dependencies
from src.vehicle_registry.api.main import app
from src.vehicle_registry.api.routers import sync as sync_router
from src.vehicle_registry.exceptions import ErrorKind, RegistryLookupError
from src.vehicle_registry.sync.config import SweepConfig
from src.vehicle_registry.utils.timeutils import utc_now

NO_PAUSE = SweepConfig(request_delay_seconds=0, batch_delay_seconds=0)


@pytest.fixture
def api(test_db, session_scope, fake_client):
    """TestClient wired to the test database and a fake registry client."""

    def override_db():
        yield test_db

    def override_client():
        yield fake_client

    app.dependency_overrides[dependencies.get_db] = override_db
    app.dependency_overrides[dependencies.get_session_scope] = lambda: session_scope
    app.dependency_overrides[dependencies.get_registry_client] = override_client
    app.dependency_overrides[dependencies.get_sweep_config] = lambda: NO_PAUSE

    yield TestClient(app)

    app.dependency_overrides.clear()


class TestSweepEndpoint:

    def test_sweep_returns_report(self, api, add_vehicle, fake_client):
        add_vehicle("V1", "AA11AAA")
        add_vehicle("V2", "BB22BBB")

        response = api.post("/api/v1/registry/sweeps", json={})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["processed"] == 2
        assert body["updated"] == 2
        assert body["errors"] == 0
        assert [d["vehicle_id"] for d in body["details"]] == ["V1", "V2"]
        assert body["details"][0]["mot_status"] == "Valid"

    def test_sweep_reports_error_kinds(self, api, add_vehicle, fake_client):
        add_vehicle("V1", "ZZ99ZZZ")
        fake_client.lookup.side_effect = RegistryLookupError(ErrorKind.NOT_FOUND, "Vehicle Not Found", status_code=404)

        body = api.post("/api/v1/registry/sweeps", json={"force_refresh": True}).json()

        assert body["errors"] == 1
        assert body["error_counts"] == {"not-found": 1}
        assert body["details"][0]["error"] == "not-found"

    def test_concurrent_sweep_rejected(self, api):
        assert sync_router._sweep_lock.acquire(blocking=False)
        try:
            response = api.post("/api/v1/registry/sweeps", json={})
        finally:
            sync_router._sweep_lock.release()

        assert response.status_code == 409

    def test_invalid_batch_size(self, api):
        response = api.post("/api/v1/registry/sweeps", json={"batch_size": 0})

        assert response.status_code == 422


class TestVehicleRefreshEndpoint:

    def test_refresh_vehicle(self, api, add_vehicle):
        add_vehicle("V1", "ab12 cde")

        response = api.post("/api/v1/registry/vehicles/V1/refresh")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["registration"] == "AB12CDE"
        assert body["mot_expiry_date"] == "2025-03-14"

    def test_unknown_vehicle_is_404(self, api):
        response = api.post("/api/v1/registry/vehicles/nope/refresh")

        assert response.status_code == 404

    def test_registry_failure_in_body(self, api, add_vehicle, fake_client):
        add_vehicle("V1", "AB12CDE")
        fake_client.lookup.side_effect = RegistryLookupError(ErrorKind.ACCESS_DENIED, "Forbidden", status_code=403)

        body = api.post("/api/v1/registry/vehicles/V1/refresh").json()

        assert body["success"] is False
        assert body["error"] == "access-denied"


class TestStatsEndpoint:

    def test_stats(self, api, add_vehicle, add_record):
        add_vehicle("V1", "AA11AAA", tenant_id="dealer-1")
        add_vehicle("V2", "BB22BBB", tenant_id="dealer-1")
        add_vehicle("V3", "CC33CCC", tenant_id="dealer-2")
        add_record("AA11AAA", utc_now() - timedelta(days=1), mot_status="Valid")

        body = api.get("/api/v1/registry/stats", params={"tenant_id": "dealer-1"}).json()

        assert body == {
            "tenant_id": "dealer-1",
            "total": 2,
            "with_data": 1,
            "needing_refresh": 1,
            "valid_status": 1,
            "expired_status": 0,
            "unknown_status": 1,
        }


class TestConfigurationAndHealth:

    def test_missing_api_key_is_503(self, test_db, session_scope):
        app.dependency_overrides[dependencies.get_session_scope] = lambda: session_scope
        app.dependency_overrides[dependencies.get_sweep_config] = lambda: NO_PAUSE
        try:
            with patch("src.vehicle_registry.clients.registry_client.settings") as mock_settings:
                mock_settings.registry_api_key = None
                response = TestClient(app).post("/api/v1/registry/sweeps", json={})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 503
        assert "API key" in response.json()["detail"]

    def test_health(self, api):
        with patch("src.vehicle_registry.api.main.settings") as mock_settings:
            mock_settings.registry_api_key = "key"
            body = api.get("/health").json()

        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["registry_configured"] is True

    def test_health_degraded_without_key(self, api):
        with patch("src.vehicle_registry.api.main.settings") as mock_settings:
            mock_settings.registry_api_key = None
            body = api.get("/health").json()

        assert body["status"] == "degraded"
        assert body["registry_configured"] is False
