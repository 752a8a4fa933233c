"""Observability module for ReviewFlow.

Provides structured logging, request correlation, metrics, and health checks.
"""

from .logging_config import configure_logging
from .request_id import request_id_var, get_request_id, set_request_id, generate_request_id
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    # Request ID
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    # Middleware
    "RequestIDMiddleware",
]
