"""
Shared API Middleware
======================

Request tracing, request logging and the error handlers for the report API.
"""

import time
import uuid
from typing import Callable
from datetime import datetime, timezone

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.responses import JSONResponse

from incident_sla.core.exceptions import (
    ApplicationException,
    ConfigurationException,
    ValidationException,
)
from incident_sla.shared.infrastructure.logging import get_context_logger

CORRELATION_HEADER = "X-Correlation-ID"


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "unknown")


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with a correlation id.

    A caller-supplied ``X-Correlation-ID`` is reused so a report upload can be
    followed across systems; otherwise a UUID is minted. The id is echoed on
    the response, including workbook downloads.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER, "").strip() or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per report request, with payload size and outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_logger = get_context_logger(__name__, _correlation_id(request))
        start_time = time.perf_counter()
        context = {
            "method": request.method,
            "path": request.url.path,
            "request_bytes": int(request.headers.get("content-length") or 0),
        }

        request_logger.debug("Request received", extra=context)

        try:
            response = await call_next(request)
        except Exception as e:
            request_logger.error(
                "Request failed",
                extra={
                    **context,
                    "error_type": type(e).__name__,
                    "elapsed_ms": int((time.perf_counter() - start_time) * 1000)
                }
            )
            raise

        request_logger.info(
            "Request completed",
            extra={
                **context,
                "status_code": response.status_code,
                "content_type": response.headers.get("content-type"),
                "elapsed_ms": int((time.perf_counter() - start_time) * 1000)
            }
        )
        return response


def _error_status(exc: ApplicationException) -> int:
    if isinstance(exc, ValidationException):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, ConfigurationException):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """
    Maps application exceptions to HTTP responses.

    - ValidationException (bad records, unusable columns) -> 422
    - ConfigurationException (threshold file) -> 500
    - anything else -> 400
    """
    correlation_id = _correlation_id(request)
    status_code = _error_status(exc)

    get_context_logger(__name__, correlation_id).warning(
        "Report request rejected",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error_message": exc.message,
            "status_code": status_code
        }
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "error_type": type(exc).__name__,
            "details": exc.details,
            "correlation_id": correlation_id
        }
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500 for anything the report pipeline did not anticipate."""
    correlation_id = _correlation_id(request)

    get_context_logger(__name__, correlation_id).exception(
        "Report request crashed",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__
        }
    )

    # Exception text only leaves the service in development
    is_dev = getattr(getattr(request.app.state, "settings", None), "environment", None) == "development"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "debug_info": str(exc) if is_dev else None
        }
    )
