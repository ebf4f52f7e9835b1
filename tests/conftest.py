"""Shared pytest fixtures for portfolio tests.

No test talks to the network or a database: outbound HTTP is patched at
each module's _do_request and database access at txn().
"""
import sys
sys.dont_write_bytecode = True

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402

TEST_BOT_TOKEN = "123456:test-bot-token"
TEST_CHAT_ID = "987654321"


@pytest.fixture
def telegram_env(monkeypatch):
    """Set Telegram environment variables."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", TEST_BOT_TOKEN)
    monkeypatch.setenv("TELEGRAM_CHAT_ID", TEST_CHAT_ID)
    monkeypatch.delenv("TELEGRAM_API_BASE_URL", raising=False)


@pytest.fixture
def device_info() -> dict:
    """Fully populated deviceInfo object as the browser sends it."""
    return {
        "userAgent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        "platform": "Win32",
        "language": "en-US",
        "screenResolution": "1920x1080",
        "browserName": "Chrome",
        "ip": "203.0.113.7",
        "latitude": 40.7128,
        "longitude": -74.006,
        "batteryLevel": "87%",
        "networkType": "4g",
    }


@pytest.fixture
def submission_payload(device_info) -> dict:
    """Valid /submit body."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0958",
        "message": "I'd like to talk about a security review.",
        "deviceInfo": device_info,
    }


def telegram_response(status_code: int = 200, body: dict | None = None) -> MagicMock:
    """Fake requests.Response for the Telegram sendMessage call."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if body is None:
        body = {"ok": True, "result": {"message_id": 1}} if response.ok else {"ok": False}
    response.json.return_value = body
    return response


IP_API_SUCCESS = {
    "status": "success",
    "country": "United States",
    "regionName": "New York",
    "city": "New York",
    "timezone": "America/New_York",
    "isp": "Example ISP",
    "org": "Example Org",
}

IPAPI_CO_SUCCESS = {
    "ip": "203.0.113.7",
    "city": "Brooklyn",
    "region": "New York",
    "country_name": "United States",
    "org": "Comcast Cable",
}


class LogRecorder:
    """Simple recorder to capture log calls deterministically."""

    def __init__(self):
        self.calls: list[tuple[str, tuple, dict]] = []

    def _record(self, level: str, *args, **kwargs):
        self.calls.append((level, args, kwargs))

    def info(self, *args, **kwargs):
        self._record("info", *args, **kwargs)

    def warning(self, *args, **kwargs):
        self._record("warning", *args, **kwargs)

    def error(self, *args, **kwargs):
        self._record("error", *args, **kwargs)

    def exception(self, *args, **kwargs):
        self._record("exception", *args, **kwargs)

    def debug(self, *args, **kwargs):
        self._record("debug", *args, **kwargs)

    def get_all_logged_content(self) -> str:
        """Concatenate all args and kwargs from all calls into one string."""
        parts = []
        for _, args, kwargs in self.calls:
            parts.append(str(args))
            parts.append(str(kwargs))
        return " ".join(parts)

    def has_extra_field(self, key: str) -> bool:
        for _, _, kwargs in self.calls:
            extra_fields = kwargs.get("extra", {}).get("extra_fields", {})
            if key in extra_fields:
                return True
        return False

    def levels(self) -> list[str]:
        return [level for level, _, _ in self.calls]
