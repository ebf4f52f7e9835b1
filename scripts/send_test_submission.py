"""Send a sample contact submission to a running server.

Usage:
    uv run python scripts/send_test_submission.py [base_url]

base_url defaults to http://localhost:8000. The device bundle is built the
same way the browser builds it, including the public IP from the IP-echo
service. The server must have TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID set
for the submission to be delivered.

This script is for local/staging validation only.
"""

from __future__ import annotations

import platform
import sys

import requests

from portfolio.contact.models import TelemetryBundle
from portfolio.contact.telemetry import (
    derive_browser_name,
    fetch_public_ip,
    format_battery_level,
    format_screen_resolution,
    telemetry_to_payload,
)

USER_AGENT = f"portfolio-smoke-test/1.0 (Python {platform.python_version()})"


def main() -> None:
    base_url = sys.argv[1].rstrip("/") if len(sys.argv) > 1 else "http://localhost:8000"

    bundle = TelemetryBundle(
        user_agent=USER_AGENT,
        platform=platform.system(),
        language="en-US",
        screen_resolution=format_screen_resolution(1920, 1080),
        browser_name=derive_browser_name(USER_AGENT),
        ip=fetch_public_ip(),
        battery_level=format_battery_level(1.0),
    )

    payload = {
        "name": "Smoke Test",
        "email": "smoke-test@example.com",
        "phone": "+1 555 0100",
        "message": "Test submission from scripts/send_test_submission.py",
        "deviceInfo": telemetry_to_payload(bundle),
    }

    print(f"POST {base_url}/submit (ip={'yes' if bundle.ip else 'no'}) ...")

    try:
        response = requests.post(f"{base_url}/submit", json=payload, timeout=30)
    except requests.RequestException as e:
        print(f"ERROR: request failed: {e}")
        sys.exit(1)

    print(f"  status: {response.status_code}")
    print(f"  body:   {response.text}")

    if response.status_code != 200:
        sys.exit(1)


if __name__ == "__main__":
    main()
