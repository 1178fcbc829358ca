"""Request ID management for request correlation.

The id lives in a ContextVar so it follows the request across awaits and
shows up on every log line emitted while handling it.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID (UUID v4)."""
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Return the current request ID or "no-request-id" outside a request."""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: Optional[str]) -> None:
    request_id_var.set(request_id)
