"""Contact submission models.

All records are immutable and live for one request. Optional members use
None for "not provided"; the formatter decides how absence is displayed.
"""

from dataclasses import dataclass
from typing import Literal

BrowserName = Literal["Firefox", "Chrome", "Safari", "Edge", "Unknown"]

UNKNOWN = "Unknown"
DEFAULT_TIMEZONE = "UTC"


@dataclass(frozen=True)
class ContactSubmission:
    """Validated contact form fields. PII: never log."""

    name: str
    email: str
    phone: str
    message: str


@dataclass(frozen=True)
class TelemetryBundle:
    """Device and network signals collected by the browser."""

    user_agent: str | None = None
    platform: str | None = None
    language: str | None = None
    screen_resolution: str | None = None
    browser_name: BrowserName = "Unknown"
    ip: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    battery_level: str | None = None
    network_type: str | None = None


@dataclass(frozen=True)
class GeolocationRecord:
    """Location resolved from the client IP."""

    city: str = UNKNOWN
    region: str = UNKNOWN
    country: str = UNKNOWN
    isp: str = UNKNOWN
    org: str = UNKNOWN
    timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def degraded(cls) -> "GeolocationRecord":
        return cls()


@dataclass(frozen=True)
class RiskAssessment:
    """Coarse network reputation for the client IP.

    threat_score is 50 when the IP looks like a VPN, proxy or hosting
    provider and 0 otherwise. Location fields come from the reputation
    service and may disagree with GeolocationRecord.
    """

    vpn_or_proxy_detected: bool = False
    threat_score: int = 0
    country: str = UNKNOWN
    region: str = UNKNOWN
    city: str = UNKNOWN
    isp: str = UNKNOWN

    @classmethod
    def degraded(cls) -> "RiskAssessment":
        return cls()


@dataclass(frozen=True)
class NotificationMessage:
    """Rendered HTML-flavored notification text. PII: never log the text."""

    text: str
