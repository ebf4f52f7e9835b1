"""Notification formatting for the Telegram sink.

format_notification() is pure: every input, including the submission time,
is passed in. The output is sent with parse_mode=HTML, so every interpolated
value goes through escape_html(). Name, email, phone and message are
attacker-controlled.

Group order and field sets are fixed; the chat reader relies on them.
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import (
    DEFAULT_TIMEZONE,
    UNKNOWN,
    ContactSubmission,
    GeolocationRecord,
    NotificationMessage,
    RiskAssessment,
    TelemetryBundle,
)

NOT_AVAILABLE = "N/A"
NOT_PROVIDED = "Not provided"

# en-US names only these abbreviations; every other zone is shown as a GMT offset.
# Offsets in hours guard against homonyms such as China's CST.
US_ZONE_ABBREVIATIONS = {
    "EST": -5,
    "EDT": -4,
    "CST": -6,
    "CDT": -5,
    "MST": -7,
    "MDT": -6,
    "PST": -8,
    "PDT": -7,
    "AKST": -9,
    "AKDT": -8,
    "HST": -10,
    "HDT": -9,
}

_HTML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}


def escape_html(value: object) -> str:
    """Escape &, <, >, double and single quotes for Telegram's HTML mode."""
    return "".join(_HTML_ENTITIES.get(char, char) for char in str(value))


def _or(value: object | None, placeholder: str) -> str:
    if value is None or value == "":
        return escape_html(placeholder)
    return escape_html(value)


def resolve_timezone(name: str | None) -> tuple[ZoneInfo, str]:
    """Return (zone, display name), falling back to UTC for unknown names."""
    if name:
        try:
            return ZoneInfo(name), name
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return ZoneInfo(DEFAULT_TIMEZONE), DEFAULT_TIMEZONE


def zone_label(local: datetime) -> str:
    """Zone suffix of an en-US long time: "EDT", "UTC", "GMT", "GMT+5:30"."""
    abbreviation = local.tzname()
    offset = local.utcoffset() or timedelta(0)
    if abbreviation == DEFAULT_TIMEZONE:
        return DEFAULT_TIMEZONE
    us_hours = US_ZONE_ABBREVIATIONS.get(abbreviation or "")
    if us_hours is not None and offset == timedelta(hours=us_hours):
        return abbreviation

    minutes = int(offset.total_seconds()) // 60
    if minutes == 0:
        return "GMT"
    sign = "+" if minutes > 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    if minutes:
        return f"GMT{sign}{hours}:{minutes:02d}"
    return f"GMT{sign}{hours}"


def format_timestamp(timestamp: datetime, timezone_name: str | None) -> str:
    """Full date, long time, en-US style.

    Example: "Saturday, October 17, 2026 at 3:04:05 PM EDT". Zones outside
    the US are labelled by offset ("GMT+9"). Naive timestamps are taken as
    UTC.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    zone, _ = resolve_timezone(timezone_name)
    local = timestamp.astimezone(zone)

    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"

    return (
        f"{local:%A}, {local:%B} {local.day}, {local.year} "
        f"at {hour}:{local:%M}:{local:%S} {meridiem} {zone_label(local)}"
    )


def _contact_section(submission: ContactSubmission) -> list[str]:
    return [
        "👤 <b>Contact Information</b>",
        f"• Name: {escape_html(submission.name)}",
        f"• Email: {escape_html(submission.email)}",
        f"• Phone: {escape_html(submission.phone)}",
    ]


def _message_section(submission: ContactSubmission) -> list[str]:
    return [
        "💬 <b>Message Content</b>",
        escape_html(submission.message),
    ]


def _device_section(telemetry: TelemetryBundle) -> list[str]:
    return [
        "📱 <b>Device Details</b>",
        f"• Browser: {_or(telemetry.browser_name, UNKNOWN)}",
        f"• Platform: {_or(telemetry.platform, NOT_AVAILABLE)}",
        f"• Screen Resolution: {_or(telemetry.screen_resolution, NOT_AVAILABLE)}",
        f"• Language: {_or(telemetry.language, NOT_AVAILABLE)}",
        f"• Battery Level: {_or(telemetry.battery_level, NOT_AVAILABLE)}",
        f"• Network Type: {_or(telemetry.network_type, NOT_AVAILABLE)}",
    ]


def _location_section(geolocation: GeolocationRecord) -> list[str]:
    return [
        "📍 <b>Location Information</b>",
        f"• City: {_or(geolocation.city, UNKNOWN)}",
        f"• Region: {_or(geolocation.region, UNKNOWN)}",
        f"• Country: {_or(geolocation.country, UNKNOWN)}",
        f"• ISP: {_or(geolocation.isp, UNKNOWN)}",
        f"• Organization: {_or(geolocation.org, UNKNOWN)}",
    ]


def _security_section(telemetry: TelemetryBundle, risk: RiskAssessment) -> list[str]:
    detection = "⚠️ Detected" if risk.vpn_or_proxy_detected else "✅ Not Detected"
    return [
        "🔒 <b>Security Information</b>",
        f"• IP Address: {_or(telemetry.ip, NOT_AVAILABLE)}",
        f"• VPN/Proxy Detection: {detection}",
        f"• Threat Score: {risk.threat_score}/100",
        f"• Country: {_or(risk.country, UNKNOWN)}",
        f"• Region: {_or(risk.region, UNKNOWN)}",
        f"• City: {_or(risk.city, UNKNOWN)}",
        f"• ISP: {_or(risk.isp, UNKNOWN)}",
    ]


def _coordinates_section(telemetry: TelemetryBundle) -> list[str]:
    return [
        "📍 <b>Coordinates</b>",
        f"• Latitude: {_or(telemetry.latitude, NOT_PROVIDED)}",
        f"• Longitude: {_or(telemetry.longitude, NOT_PROVIDED)}",
    ]


def _submission_section(timestamp: datetime, geolocation: GeolocationRecord) -> list[str]:
    _, zone_name = resolve_timezone(geolocation.timezone)
    return [
        "⏰ <b>Submission Details</b>",
        f"• Timestamp: {escape_html(format_timestamp(timestamp, zone_name))}",
        f"• Timezone: {escape_html(zone_name)}",
    ]


def format_notification(
    submission: ContactSubmission,
    telemetry: TelemetryBundle,
    geolocation: GeolocationRecord,
    risk: RiskAssessment,
    timestamp: datetime,
) -> NotificationMessage:
    """Render the contact notification.

    Args:
        submission: Validated contact fields.
        telemetry: Client device bundle.
        geolocation: Resolved or degraded location record.
        risk: Resolved or degraded risk assessment.
        timestamp: Submission instant, localized to geolocation.timezone.

    Returns:
        NotificationMessage with seven groups in fixed order: contact,
        message, device, location, security, coordinates, submission.
    """
    sections = [
        _contact_section(submission),
        _message_section(submission),
        _device_section(telemetry),
        _location_section(geolocation),
        _security_section(telemetry, risk),
        _coordinates_section(telemetry),
        _submission_section(timestamp, geolocation),
    ]

    lines = ["🚨 <b>New Contact Form Submission</b>"]
    for section in sections:
        lines.append("")
        lines.extend(section)

    return NotificationMessage(text="\n".join(lines) + "\n")
