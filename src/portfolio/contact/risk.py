"""IP reputation heuristic via ipapi.co.

An IP is flagged as VPN/proxy when the owning organisation's name mentions
"vpn" or "proxy", or the service marks it as a hosting provider. The threat
score is two-valued: 50 when flagged, 0 otherwise.

Like geolocation, assess_risk() never raises; failures yield
RiskAssessment.degraded().
"""

import os
from typing import Any

import requests

from portfolio.observability.logging import get_logger
from portfolio.observability.redaction import hash_identifier, safe_log_context

from .errors import LookupFailedError
from .models import UNKNOWN, RiskAssessment

logger = get_logger(__name__)

RISK_API_URL = os.environ.get("RISK_API_URL", "https://ipapi.co/{ip}/json/")
HTTP_TIMEOUT = float(os.environ.get("LOOKUP_HTTP_TIMEOUT", "5"))

SUSPICIOUS_ORG_MARKERS = ("vpn", "proxy")
SUSPICIOUS_THREAT_SCORE = 50


def _do_request(url: str) -> Any:
    """GET url and decode JSON. Raises on network, HTTP or decode errors."""
    response = requests.get(url, timeout=HTTP_TIMEOUT)
    response.raise_for_status()
    return response.json()


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or value == "":
        return UNKNOWN
    return str(value)


def is_vpn_or_proxy(org: str | None, hosting: Any) -> bool:
    """Apply the org-name / hosting-flag rule."""
    if hosting is True:
        return True
    if not org:
        return False
    lowered = org.lower()
    return any(marker in lowered for marker in SUSPICIOUS_ORG_MARKERS)


def _lookup(ip: str | None) -> RiskAssessment:
    if not ip:
        raise LookupFailedError("no ip address")

    try:
        data = _do_request(RISK_API_URL.format(ip=ip))
    except (requests.RequestException, ValueError) as e:
        raise LookupFailedError(f"{type(e).__name__}") from e

    if not isinstance(data, dict):
        raise LookupFailedError("unexpected response shape")

    # ipapi.co reports reserved IPs and quota exhaustion as {"error": true, "reason": ...}
    if data.get("error"):
        raise LookupFailedError(f"lookup error: {data.get('reason', 'unknown')}")

    org = data.get("org")
    suspicious = is_vpn_or_proxy(org if isinstance(org, str) else None, data.get("hosting"))

    return RiskAssessment(
        vpn_or_proxy_detected=suspicious,
        threat_score=SUSPICIOUS_THREAT_SCORE if suspicious else 0,
        country=_text(data, "country_name"),
        region=_text(data, "region"),
        city=_text(data, "city"),
        isp=_text(data, "org"),
    )


def assess_risk(ip: str | None) -> RiskAssessment:
    """Assess VPN/proxy likelihood for an IP. Never raises."""
    try:
        assessment = _lookup(ip)
    except LookupFailedError as e:
        logger.warning(
            "risk lookup failed, using degraded assessment",
            extra={
                "extra_fields": safe_log_context(
                    ip_hash=hash_identifier(ip),
                    reason=str(e),
                )
            },
        )
        return RiskAssessment.degraded()

    logger.info(
        "risk assessed",
        extra={
            "extra_fields": safe_log_context(
                ip_hash=hash_identifier(ip),
                vpn_or_proxy_detected=assessment.vpn_or_proxy_detected,
                threat_score=assessment.threat_score,
            )
        },
    )
    return assessment
