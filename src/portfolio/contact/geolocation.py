"""IP geolocation via ip-api.com.

Best-effort enrichment: resolve_geolocation() always returns a record. Any
failure is logged and replaced with GeolocationRecord.degraded().
"""

import os
from typing import Any

import requests

from portfolio.observability.logging import get_logger
from portfolio.observability.redaction import hash_identifier, safe_log_context

from .errors import LookupFailedError
from .models import DEFAULT_TIMEZONE, UNKNOWN, GeolocationRecord

logger = get_logger(__name__)

GEOLOCATION_API_URL = os.environ.get("GEOLOCATION_API_URL", "http://ip-api.com/json/{ip}")
HTTP_TIMEOUT = float(os.environ.get("LOOKUP_HTTP_TIMEOUT", "5"))


def _do_request(url: str) -> Any:
    """GET url and decode JSON. Raises on network, HTTP or decode errors."""
    response = requests.get(url, timeout=HTTP_TIMEOUT)
    response.raise_for_status()
    return response.json()


def _text(data: dict[str, Any], key: str, default: str = UNKNOWN) -> str:
    value = data.get(key)
    if value is None or value == "":
        return default
    return str(value)


def _lookup(ip: str | None) -> GeolocationRecord:
    if not ip:
        raise LookupFailedError("no ip address")

    try:
        data = _do_request(GEOLOCATION_API_URL.format(ip=ip))
    except (requests.RequestException, ValueError) as e:
        raise LookupFailedError(f"{type(e).__name__}") from e

    if not isinstance(data, dict):
        raise LookupFailedError("unexpected response shape")

    # ip-api answers 200 with status=fail for private, reserved or invalid IPs
    if data.get("status") != "success":
        raise LookupFailedError(f"lookup status {data.get('status')!r}: {data.get('message', '')}")

    return GeolocationRecord(
        city=_text(data, "city"),
        region=_text(data, "regionName"),
        country=_text(data, "country"),
        isp=_text(data, "isp"),
        org=_text(data, "org"),
        timezone=_text(data, "timezone", DEFAULT_TIMEZONE),
    )


def resolve_geolocation(ip: str | None) -> GeolocationRecord:
    """Resolve city/region/country/ISP/timezone for an IP.

    Args:
        ip: Client public IP. May be None when the browser's IP echo failed.

    Returns:
        The resolved record, or the degraded record ("Unknown" fields,
        timezone "UTC") if the lookup failed for any reason.
    """
    try:
        record = _lookup(ip)
    except LookupFailedError as e:
        logger.warning(
            "geolocation lookup failed, using degraded record",
            extra={
                "extra_fields": safe_log_context(
                    ip_hash=hash_identifier(ip),
                    reason=str(e),
                )
            },
        )
        return GeolocationRecord.degraded()

    logger.info(
        "geolocation resolved",
        extra={"extra_fields": safe_log_context(ip_hash=hash_identifier(ip), timezone=record.timezone)},
    )
    return record
