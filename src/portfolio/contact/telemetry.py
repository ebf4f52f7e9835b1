"""Client telemetry: parsing the deviceInfo bundle and collection helpers.

The browser collects the bundle when the contact form mounts. The helpers
below mirror that collection so scripted clients can build the same shape,
and so the server can fill in a browser name the client did not send.
"""

import math
import os
from typing import Any, get_args

import requests

from portfolio.observability.logging import get_logger

from .models import BrowserName, TelemetryBundle

logger = get_logger(__name__)

IP_ECHO_URL = os.environ.get("IP_ECHO_URL", "https://api.ipify.org?format=json")
HTTP_TIMEOUT = float(os.environ.get("LOOKUP_HTTP_TIMEOUT", "5"))

KNOWN_BROWSERS: tuple[str, ...] = get_args(BrowserName)


def derive_browser_name(user_agent: str | None) -> BrowserName:
    """Map a user agent string to a coarse browser family.

    Edge and Chrome user agents both contain "Chrome", and Chrome's contains
    "Safari", so the checks run from most to least specific.
    """
    if not user_agent:
        return "Unknown"
    if "Firefox" in user_agent:
        return "Firefox"
    if "Edg/" in user_agent or "Edge/" in user_agent:
        return "Edge"
    if "Chrome" in user_agent:
        return "Chrome"
    if "Safari" in user_agent:
        return "Safari"
    return "Unknown"


def format_battery_level(level: float | None) -> str | None:
    """Render a 0..1 battery level as a rounded percentage ("87%")."""
    if level is None:
        return None
    return f"{round(level * 100)}%"


def format_screen_resolution(width: int, height: int) -> str:
    return f"{width}x{height}"


def fetch_public_ip() -> str | None:
    """Ask the IP-echo service for this machine's public IP.

    Returns None on any failure; the bundle is still usable without an IP.
    """
    try:
        response = requests.get(IP_ECHO_URL, timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        ip = response.json().get("ip")
    except (requests.RequestException, ValueError, AttributeError) as e:
        logger.warning("ip echo lookup failed", extra={"extra_fields": {"error_type": type(e).__name__}})
        return None
    return ip or None


def _optional_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_telemetry(device_info: dict[str, Any]) -> TelemetryBundle:
    """Build a TelemetryBundle from the camelCase deviceInfo object.

    Empty strings and non-numeric coordinates are treated as absent. An
    unrecognised browserName is re-derived from the user agent.
    """
    user_agent = _optional_str(device_info.get("userAgent"))

    browser_name = _optional_str(device_info.get("browserName"))
    if browser_name not in KNOWN_BROWSERS:
        browser_name = derive_browser_name(user_agent)

    return TelemetryBundle(
        user_agent=user_agent,
        platform=_optional_str(device_info.get("platform")),
        language=_optional_str(device_info.get("language")),
        screen_resolution=_optional_str(device_info.get("screenResolution")),
        browser_name=browser_name,  # type: ignore[arg-type]
        ip=_optional_str(device_info.get("ip")),
        latitude=_optional_float(device_info.get("latitude")),
        longitude=_optional_float(device_info.get("longitude")),
        battery_level=_optional_str(device_info.get("batteryLevel")),
        network_type=_optional_str(device_info.get("networkType")),
    )


def telemetry_to_payload(bundle: TelemetryBundle) -> dict[str, Any]:
    """Inverse of parse_telemetry, omitting absent members."""
    payload = {
        "userAgent": bundle.user_agent,
        "platform": bundle.platform,
        "language": bundle.language,
        "screenResolution": bundle.screen_resolution,
        "browserName": bundle.browser_name,
        "ip": bundle.ip,
        "latitude": bundle.latitude,
        "longitude": bundle.longitude,
        "batteryLevel": bundle.battery_level,
        "networkType": bundle.network_type,
    }
    return {k: v for k, v in payload.items() if v is not None}
