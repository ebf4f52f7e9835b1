"""End-to-end tests for POST /submit.

All outbound HTTP is patched at each module's _do_request, so the full
pipeline (validation, concurrent lookups, formatting, dispatch) runs for
real inside the test client.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
import requests
from fastapi.testclient import TestClient

from conftest import IP_API_SUCCESS, IPAPI_CO_SUCCESS, LogRecorder, telegram_response
from portfolio.api.factory import create_app
from portfolio.contact.pipeline import process_submission


@pytest.fixture
def client(telegram_env):
    return TestClient(create_app())


@contextmanager
def outbound(
    geo=IP_API_SUCCESS,
    risk=IPAPI_CO_SUCCESS,
    telegram=None,
):
    """Patch the three outbound services. Exceptions are raised as side effects."""

    def _kwargs(value):
        if isinstance(value, Exception):
            return {"side_effect": value}
        return {"return_value": value}

    with patch("portfolio.contact.geolocation._do_request", **_kwargs(geo)) as geo_mock, \
            patch("portfolio.contact.risk._do_request", **_kwargs(risk)) as risk_mock, \
            patch(
                "portfolio.contact.dispatcher._do_request",
                **_kwargs(telegram if telegram is not None else telegram_response()),
            ) as telegram_mock:
        yield geo_mock, risk_mock, telegram_mock


def _sent_text(telegram_mock) -> str:
    return telegram_mock.call_args.args[1]["text"]


class TestSubmitSuccess:
    def test_returns_success(self, client, submission_payload):
        with outbound() as (geo_mock, risk_mock, telegram_mock):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        geo_mock.assert_called_once_with("http://ip-api.com/json/203.0.113.7")
        risk_mock.assert_called_once_with("https://ipapi.co/203.0.113.7/json/")
        telegram_mock.assert_called_once()

    def test_notification_combines_all_sources(self, client, submission_payload):
        with outbound() as (_, _, telegram_mock):
            client.post("/submit", json=submission_payload)

        text = _sent_text(telegram_mock)
        assert "• Name: Ada Lovelace" in text
        assert "I&#39;d like to talk about a security review." in text
        assert "• Browser: Chrome" in text
        assert "• Organization: Example Org" in text
        assert "• ISP: Comcast Cable" in text
        assert "• Timezone: America/New_York" in text
        assert "• Latitude: 40.7128" in text

    def test_script_name_is_escaped(self, client, submission_payload):
        submission_payload["name"] = "<script>"

        with outbound() as (_, _, telegram_mock):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 200
        text = _sent_text(telegram_mock)
        assert "&lt;script&gt;" in text
        assert "<script>" not in text

    def test_absent_optional_telemetry_renders_placeholders(self, client, submission_payload):
        for key in ("batteryLevel", "networkType", "latitude", "longitude"):
            del submission_payload["deviceInfo"][key]

        with outbound() as (_, _, telegram_mock):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 200
        text = _sent_text(telegram_mock)
        assert "• Battery Level: N/A" in text
        assert "• Network Type: N/A" in text
        assert "• Latitude: Not provided" in text
        assert "• Longitude: Not provided" in text
        assert "undefined" not in text

    def test_vpn_submission_is_flagged(self, client, submission_payload):
        with outbound(risk={**IPAPI_CO_SUCCESS, "org": "VPN Provider Inc."}) as (_, _, telegram_mock):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 200
        text = _sent_text(telegram_mock)
        assert "• VPN/Proxy Detection: ⚠️ Detected" in text
        assert "• Threat Score: 50/100" in text


class TestDegradedLookups:
    def test_geolocation_failure_still_dispatches(self, client, submission_payload):
        with outbound(geo=requests.ConnectionError("network down")) as (_, _, telegram_mock):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 200
        text = _sent_text(telegram_mock)
        assert "• City: Unknown" in text
        assert "• Region: Unknown" in text
        assert "• Country: Unknown" in text
        assert "• ISP: Unknown" in text
        assert "• Timezone: UTC" in text
        timestamp_line = next(line for line in text.splitlines() if line.startswith("• Timestamp:"))
        assert timestamp_line.endswith(" UTC")

    def test_both_lookups_time_out(self, client, submission_payload):
        with outbound(geo=requests.Timeout("slow"), risk=requests.Timeout("slow")) as (
            _,
            _,
            telegram_mock,
        ):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 200
        text = _sent_text(telegram_mock)
        assert "• VPN/Proxy Detection: ✅ Not Detected" in text
        assert "• Threat Score: 0/100" in text

    def test_missing_ip_skips_lookups(self, client, submission_payload):
        del submission_payload["deviceInfo"]["ip"]

        with outbound() as (geo_mock, risk_mock, telegram_mock):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 200
        geo_mock.assert_not_called()
        risk_mock.assert_not_called()
        assert "• IP Address: N/A" in _sent_text(telegram_mock)


class TestValidationFailures:
    @pytest.mark.parametrize("field", ["name", "email", "phone", "message", "deviceInfo"])
    def test_missing_field_returns_400_without_outbound_calls(
        self, client, submission_payload, field
    ):
        del submission_payload[field]

        with outbound() as (geo_mock, risk_mock, telegram_mock):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}
        geo_mock.assert_not_called()
        risk_mock.assert_not_called()
        telegram_mock.assert_not_called()

    def test_empty_name_returns_400(self, client, submission_payload):
        submission_payload["name"] = ""

        with outbound() as (_, _, telegram_mock):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 400
        telegram_mock.assert_not_called()

    def test_array_body_returns_400(self, client):
        with outbound() as (_, _, telegram_mock):
            response = client.post("/submit", json=[1, 2, 3])

        assert response.status_code == 400
        telegram_mock.assert_not_called()


class TestDispatchFailures:
    def test_telegram_error_status_returns_500(self, client, submission_payload):
        failure = telegram_response(401, {"ok": False, "description": "Unauthorized"})

        with outbound(telegram=failure) as (geo_mock, risk_mock, _):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal server error"
        assert body["details"]
        assert "Unauthorized" in body["details"]
        # Enrichment already ran before the dispatch failed
        geo_mock.assert_called_once()
        risk_mock.assert_called_once()

    def test_telegram_network_error_returns_500(self, client, submission_payload):
        with outbound(telegram=requests.ConnectionError("refused")):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 500
        assert response.json()["details"].startswith("Failed to send Telegram message")

    def test_missing_telegram_config_returns_500(self, client, submission_payload, monkeypatch):
        monkeypatch.delenv("TELEGRAM_BOT_TOKEN")

        with outbound() as (_, _, telegram_mock):
            response = client.post("/submit", json=submission_payload)

        assert response.status_code == 500
        assert "Missing Telegram config" in response.json()["details"]
        telegram_mock.assert_not_called()

    def test_malformed_json_returns_500(self, client):
        response = client.post(
            "/submit",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal server error"
        assert body["details"]


class TestNoDeduplication:
    def test_identical_payload_dispatches_twice(self, client, submission_payload):
        with outbound() as (_, _, telegram_mock):
            first = client.post("/submit", json=submission_payload)
            second = client.post("/submit", json=submission_payload)

        assert first.status_code == second.status_code == 200
        assert telegram_mock.call_count == 2


class TestProcessSubmission:
    def test_explicit_timestamp_is_used(self, telegram_env, submission_payload):
        now = datetime(2026, 10, 17, 19, 4, 5, tzinfo=timezone.utc)

        with outbound() as (_, _, telegram_mock):
            process_submission(submission_payload, now=now)

        assert (
            "• Timestamp: Saturday, October 17, 2026 at 3:04:05 PM EDT"
            in _sent_text(telegram_mock)
        )

    def test_route_logs_no_pii(self, client, submission_payload):
        recorder = LogRecorder()

        with patch("portfolio.api.routes.contact.logger", recorder), \
                patch("portfolio.contact.pipeline.logger", recorder):
            with outbound():
                client.post("/submit", json=submission_payload)

        all_logged = recorder.get_all_logged_content()
        for value in ("Ada Lovelace", "ada@example.com", "+44 20 7946 0958", "security review", "203.0.113.7"):
            assert value not in all_logged
        assert recorder.levels() == ["info", "info"]
