"""Observability module for docshelf: structured logging, request ids, metrics, health."""

from .logging_config import configure_logging, JSONFormatter, RequestIDFilter
from .request_id import request_id_var, get_request_id, set_request_id, generate_request_id
from .middleware import RequestIDMiddleware

__all__ = [
    "configure_logging",
    "JSONFormatter",
    "RequestIDFilter",
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    "RequestIDMiddleware",
]
