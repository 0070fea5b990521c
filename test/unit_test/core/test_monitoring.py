"""Unit tests for Logfire monitoring setup and business event helpers."""

from unittest.mock import MagicMock, patch

import pytest

from bidchemz_logistics.core import monitoring


@pytest.fixture
def logfire_enabled(monkeypatch):
    monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
    monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "test-token")
    monkeypatch.setattr(monitoring, "_configured", False)


class TestInitializeLogfire:
    def test_disabled_does_nothing(self, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", False)
        monkeypatch.setattr(monitoring, "_configured", False)
        with patch.object(monitoring.logfire, "configure") as configure:
            monitoring.initialize_logfire()
        configure.assert_not_called()
        assert monitoring.is_logfire_active() is False

    def test_enabled_without_token_does_nothing(self, monkeypatch):
        monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", True)
        monkeypatch.setattr(monitoring, "LOGFIRE_TOKEN", "")
        with patch.object(monitoring.logfire, "configure") as configure:
            monitoring.initialize_logfire()
        configure.assert_not_called()

    def test_enabled_configures_and_instruments(self, logfire_enabled):
        app = MagicMock()
        with (
            patch.object(monitoring.logfire, "configure") as configure,
            patch.object(monitoring.logfire, "instrument_sqlalchemy") as sqlalchemy,
            patch.object(monitoring.logfire, "instrument_httpx") as httpx,
            patch.object(monitoring.logfire, "instrument_fastapi") as fastapi,
        ):
            monitoring.initialize_logfire(app)

        configure.assert_called_once()
        assert configure.call_args.kwargs["token"] == "test-token"
        sqlalchemy.assert_called_once()
        httpx.assert_called_once()
        fastapi.assert_called_once_with(app=app)
        assert monitoring.is_logfire_active() is True

    def test_instrumentation_failure_is_tolerated(self, logfire_enabled):
        with (
            patch.object(monitoring.logfire, "configure"),
            patch.object(monitoring.logfire, "instrument_sqlalchemy", side_effect=RuntimeError("boom")),
            patch.object(monitoring.logfire, "instrument_httpx"),
        ):
            monitoring.initialize_logfire()
        assert monitoring.is_logfire_active() is True

    def test_configure_failure_leaves_logfire_inactive(self, logfire_enabled):
        with patch.object(monitoring.logfire, "configure", side_effect=RuntimeError("bad token")):
            monitoring.initialize_logfire()
        assert monitoring.is_logfire_active() is False


class TestEventHelpers:
    def test_noop_when_not_configured(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_configured", False)
        with patch.object(monitoring.logfire, "info") as info:
            monitoring.log_lead_charged("p-1", "q-1", 1379.04, "SHARED")
            monitoring.log_quote_event("q-1", "created")
            monitoring.log_api_request("GET", "/health", 200, 1.5)
        info.assert_not_called()

    def test_lead_charge_is_reported(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_configured", True)
        with patch.object(monitoring.logfire, "info") as info:
            monitoring.log_lead_charged("p-1", "q-1", 1379.04, "SHARED")
        info.assert_called_once_with(
            "Lead fee charged", partner_id="p-1", quote_id="q-1", amount=1379.04, lead_type="SHARED"
        )

    def test_quote_event_carries_attributes(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_configured", True)
        with patch.object(monitoring.logfire, "info") as info:
            monitoring.log_quote_event("q-1", "selected", offer_id="o-1")
        assert info.call_args.kwargs == {"event": "selected", "quote_id": "q-1", "offer_id": "o-1"}

    def test_logfire_errors_are_swallowed(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_configured", True)
        with patch.object(monitoring.logfire, "error", side_effect=RuntimeError("exporter down")):
            monitoring.log_error("ValueError", "bad input", {"path": "/api/v1/quotes"})

    def test_webhook_delivery_marks_non_2xx_as_undelivered(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_configured", True)
        with patch.object(monitoring.logfire, "info") as info:
            monitoring.log_webhook_delivery("OFFER_SELECTED", "https://hooks.example.com/in", 502, 2)
            monitoring.log_webhook_delivery("OFFER_SELECTED", "https://hooks.example.com/in", None, 3)
            monitoring.log_webhook_delivery("OFFER_SELECTED", "https://hooks.example.com/in", 204, 4)
        assert [c.kwargs["delivered"] for c in info.call_args_list] == [False, False, True]
        assert info.call_args.kwargs["attempts"] == 4

    def test_background_job_outcome_is_reported(self, monkeypatch):
        monkeypatch.setattr(monitoring, "_configured", True)
        with patch.object(monitoring.logfire, "info") as info:
            monitoring.log_background_job("expire_quotes", "rejected", 12.5)
        info.assert_called_once_with(
            "Background job {name} {status}", name="expire_quotes", status="rejected", duration_ms=12.5
        )
