"""Contact form submission route.

POST /submit validates the form, enriches it with IP geolocation and a
VPN/proxy heuristic, and relays it to Telegram.

Security:
- Name, email, phone, message and IP are PII and are NEVER logged
- Error details returned to the client never include a stack trace
"""

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from portfolio.contact.errors import DispatchError, SubmissionValidationError
from portfolio.contact.pipeline import process_submission
from portfolio.observability.correlation import get_correlation_id
from portfolio.observability.logging import get_logger
from portfolio.observability.redaction import safe_log_context

router = APIRouter(tags=["contact"])

logger = get_logger(__name__)


def _details(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


@router.post("/submit")
async def submit(request: Request) -> JSONResponse:
    """Handle a contact form submission.

    Returns:
        200 {"success": true} once Telegram accepted the notification.
        400 {"error": "Missing required fields"} if validation failed.
        500 {"error": "Internal server error", "details": ...} otherwise.
    """
    correlation_id = get_correlation_id()

    try:
        payload = await request.json()
        await run_in_threadpool(process_submission, payload)
    except SubmissionValidationError as e:
        logger.warning(
            "contact submission rejected",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id,
                    missing_fields=",".join(e.missing_fields),
                )
            },
        )
        return JSONResponse(status_code=400, content={"error": "Missing required fields"})
    except DispatchError as e:
        logger.error(
            "contact notification not delivered",
            extra={"extra_fields": safe_log_context(correlationId=correlation_id)},
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": _details(e)},
        )
    except Exception as e:
        logger.exception(
            "contact submission failed",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id,
                    error_type=type(e).__name__,
                )
            },
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": _details(e)},
        )

    logger.info(
        "contact submission delivered",
        extra={"extra_fields": safe_log_context(correlationId=correlation_id)},
    )
    return JSONResponse(content={"success": True})
