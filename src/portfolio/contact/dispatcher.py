"""Outbound notification delivery via the Telegram Bot API.

Security: NEVER log the chat id or message text. Only log hashes and lengths.

Delivery is single-shot. There is no retry and no queue: a failure here
fails the whole submission.
"""

import os
from typing import Any

import requests

from portfolio.observability.logging import get_logger
from portfolio.observability.redaction import hash_identifier, safe_log_context

from .errors import DispatchError
from .models import NotificationMessage

logger = get_logger(__name__)

# Timeout for HTTP requests (seconds)
HTTP_TIMEOUT = float(os.environ.get("TELEGRAM_HTTP_TIMEOUT", "10"))

DEFAULT_API_BASE_URL = "https://api.telegram.org"
PARSE_MODE = "HTML"


def _get_config(
    bot_token: str | None = None,
    chat_id: str | None = None,
) -> dict[str, str]:
    """Get Telegram config from params or environment.

    Required env vars (if not provided as args):
    - TELEGRAM_BOT_TOKEN: Bot token from @BotFather
    - TELEGRAM_CHAT_ID: Recipient chat id

    Optional:
    - TELEGRAM_API_BASE_URL: API base (default: https://api.telegram.org)
    """
    resolved_token = bot_token or os.environ.get("TELEGRAM_BOT_TOKEN", "")
    resolved_chat_id = chat_id or os.environ.get("TELEGRAM_CHAT_ID", "")

    if not resolved_token or not resolved_chat_id:
        raise RuntimeError(
            "Missing Telegram config: TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID required"
        )

    base_url = os.environ.get("TELEGRAM_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")

    return {
        "bot_token": resolved_token,
        "chat_id": resolved_chat_id,
        "base_url": base_url,
    }


def _do_request(url: str, payload: dict[str, Any]) -> requests.Response:
    """Execute HTTP POST. Raises requests.RequestException on network errors."""
    return requests.post(url, json=payload, timeout=HTTP_TIMEOUT)


def _error_description(response: requests.Response) -> str:
    """Best-effort description from a Telegram error response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("description"):
        return str(body["description"])
    return f"HTTP {response.status_code}"


def send_notification(
    message: NotificationMessage,
    *,
    bot_token: str | None = None,
    chat_id: str | None = None,
) -> None:
    """Send the notification to the configured Telegram chat.

    Args:
        message: Rendered notification. NEVER logged.
        bot_token: Bot token (overrides env).
        chat_id: Recipient chat id (overrides env). NEVER logged.

    Raises:
        RuntimeError: If config is missing.
        DispatchError: On network error, timeout, non-2xx status or an
            ok=false response body.
    """
    config = _get_config(bot_token, chat_id)

    url = f"{config['base_url']}/bot{config['bot_token']}/sendMessage"
    payload = {
        "chat_id": config["chat_id"],
        "text": message.text,
        "parse_mode": PARSE_MODE,
    }

    log_ctx = safe_log_context(
        chat_hash=hash_identifier(config["chat_id"]),
        text_len=len(message.text),
        provider="telegram",
    )

    logger.info("sending notification via telegram", extra={"extra_fields": log_ctx})

    try:
        response = _do_request(url, payload)
    except requests.RequestException as e:
        # The exception text embeds the URL, which carries the bot token
        logger.error(
            "telegram request failed",
            extra={"extra_fields": {**log_ctx, "error_type": type(e).__name__}},
        )
        raise DispatchError(f"Failed to send Telegram message: {type(e).__name__}") from e

    if not response.ok:
        description = _error_description(response)
        logger.error(
            "telegram api error",
            extra={
                "extra_fields": {
                    **log_ctx,
                    "status_code": str(response.status_code),
                    "description": description,
                }
            },
        )
        raise DispatchError(f"Telegram API error: {description}")

    try:
        body = response.json()
    except ValueError:
        body = {}
    if isinstance(body, dict) and body.get("ok") is False:
        description = _error_description(response)
        logger.error(
            "telegram api rejected message",
            extra={"extra_fields": {**log_ctx, "description": description}},
        )
        raise DispatchError(f"Telegram API error: {description}")

    logger.info("notification sent via telegram", extra={"extra_fields": log_ctx})
