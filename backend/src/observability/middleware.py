"""FastAPI middleware for observability.

Assigns a request ID to every HTTP request, logs its outcome and records
request metrics.
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from . import metrics
from .request_id import reset_request_id, resolve_request_id, set_request_id

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and inject request IDs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get("X-Request-ID"))
        token = set_request_id(request_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {e}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "error_type": type(e).__name__,
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True
            )
            raise
        else:
            duration_ms = (time.perf_counter() - start_time) * 1000
            metrics.http_requests_total.labels(
                method=request.method, status_code=str(response.status_code)
            ).inc()
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                    "client_ip": request.client.host if request.client else None,
                }
            )
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            reset_request_id(token)
