"""Correlation ID management for request tracing.

The browser may send its own X-Correlation-ID. It is echoed on the response
and written to every log line, so only short opaque tokens are accepted;
anything else is replaced by a fresh UUID.
"""

import re
import uuid
from contextvars import ContextVar, Token

# Set per request by the factory middleware; read by the JSON log formatter
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"

MAX_CORRELATION_ID_LENGTH = 64
_CORRELATION_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:-]*$")


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def is_valid_correlation_id(value: str | None) -> bool:
    if not value or len(value) > MAX_CORRELATION_ID_LENGTH:
        return False
    return _CORRELATION_ID_RE.match(value) is not None


def resolve_correlation_id(header_value: str | None) -> str:
    """Use the client's correlation ID if well formed, else generate one."""
    if is_valid_correlation_id(header_value):
        return header_value
    return generate_correlation_id()


def get_correlation_id() -> str:
    """Current correlation ID ("" outside a request)."""
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> Token[str]:
    return correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    correlation_id_var.reset(token)
