"""Contact submission pipeline.

validate -> {geolocation, risk} concurrently -> format -> dispatch

Both lookups always yield a value, so the join never fails. Validation
errors surface before any outbound call; dispatch errors surface after the
enrichment already ran.
"""

from concurrent.futures import ThreadPoolExecutor
from contextvars import copy_context
from datetime import datetime, timezone
from typing import Any

from portfolio.observability.logging import get_logger
from portfolio.observability.redaction import safe_log_context

from .dispatcher import send_notification
from .formatter import format_notification
from .geolocation import resolve_geolocation
from .models import GeolocationRecord, RiskAssessment, TelemetryBundle
from .risk import assess_risk
from .validation import validate_submission

logger = get_logger(__name__)


def enrich(telemetry: TelemetryBundle) -> tuple[GeolocationRecord, RiskAssessment]:
    """Run the geolocation and risk lookups for the client IP in parallel."""
    # One context copy per task so lookup logs keep the correlation ID
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="contact-enrich") as executor:
        geolocation_future = executor.submit(copy_context().run, resolve_geolocation, telemetry.ip)
        risk_future = executor.submit(copy_context().run, assess_risk, telemetry.ip)
        return geolocation_future.result(), risk_future.result()


def process_submission(payload: Any, *, now: datetime | None = None) -> None:
    """Validate, enrich, format and deliver one contact submission.

    Args:
        payload: Decoded JSON body of POST /submit.
        now: Submission instant. Defaults to the current UTC time.

    Raises:
        SubmissionValidationError: Required fields missing. No outbound
            call was made.
        DispatchError: Telegram delivery failed.
        RuntimeError: Telegram is not configured.
    """
    submission, telemetry = validate_submission(payload)

    logger.info(
        "contact submission accepted",
        extra={
            "extra_fields": safe_log_context(
                message_len=len(submission.message),
                browser=telemetry.browser_name,
                has_ip=telemetry.ip is not None,
                has_coordinates=telemetry.latitude is not None and telemetry.longitude is not None,
            )
        },
    )

    geolocation, risk = enrich(telemetry)

    message = format_notification(
        submission,
        telemetry,
        geolocation,
        risk,
        now or datetime.now(timezone.utc),
    )

    send_notification(message)
