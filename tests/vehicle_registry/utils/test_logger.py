"""
Tests for logging processors.
"""
from src.vehicle_registry.utils.logger import SERVICE_NAME, add_app_context, redact_secrets


class TestProcessors:

    def test_redacts_credentials(self):
        event = redact_secrets(None, "info", {"event": "lookup", "api_key": "secret", "registration": "AB12CDE"})

        assert event["api_key"] == "***"
        assert event["registration"] == "AB12CDE"

    def test_app_context_keeps_explicit_service(self):
        assert add_app_context(None, "info", {"event": "x"})["service"] == SERVICE_NAME
        assert add_app_context(None, "info", {"event": "x", "service": "dag"})["service"] == "dag"
