"""Submission validation.

Runs before any outbound call: a rejected submission never touches the
lookup services or Telegram.
"""

from typing import Any

from .errors import SubmissionValidationError
from .models import ContactSubmission, TelemetryBundle
from .telemetry import parse_telemetry

CONTACT_FIELDS = ("name", "email", "phone", "message")
DEVICE_INFO_FIELD = "deviceInfo"
REQUIRED_FIELDS = (*CONTACT_FIELDS, DEVICE_INFO_FIELD)


def _present(value: Any) -> bool:
    # Contact fields are text; numbers and booleans count as missing
    return isinstance(value, str) and bool(value.strip())


def validate_submission(payload: Any) -> tuple[ContactSubmission, TelemetryBundle]:
    """Validate a decoded /submit body.

    Args:
        payload: Decoded JSON body. Anything other than an object counts as
            missing every field.

    Returns:
        (ContactSubmission, TelemetryBundle) parsed from the body.

    Raises:
        SubmissionValidationError: If name, email, phone or message is
            missing, blank or not a string, or deviceInfo is not an object.
    """
    if not isinstance(payload, dict):
        raise SubmissionValidationError(REQUIRED_FIELDS)

    missing = [field for field in CONTACT_FIELDS if not _present(payload.get(field))]

    device_info = payload.get(DEVICE_INFO_FIELD)
    if not isinstance(device_info, dict):
        missing.append(DEVICE_INFO_FIELD)

    if missing:
        raise SubmissionValidationError(tuple(missing))

    submission = ContactSubmission(
        name=payload["name"],
        email=payload["email"],
        phone=payload["phone"],
        message=payload["message"],
    )
    return submission, parse_telemetry(device_info)
